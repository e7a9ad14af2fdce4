from marshmallow import EXCLUDE, Schema, fields, validate


class RequestSchema(Schema):
    """Base for JSON bodies: unknown keys are ignored, one message per schema"""

    error_message = "Datos de entrada inválidos"

    class Meta:
        unknown = EXCLUDE


class AddCartItemSchema(RequestSchema):
    # Values are re-validated by CartService after the cart lookup
    error_message = "Se requiere product_variant_id y qty (mayor a 0)"

    product_variant_id = fields.Raw(load_default=None, allow_none=True)
    qty = fields.Raw(load_default=None, allow_none=True)
    conversation_id = fields.Int(load_default=None, allow_none=True, strict=True)


class UpdateCartItemSchema(RequestSchema):
    error_message = "Se requiere qty (mayor a 0)"

    qty = fields.Int(required=True, strict=True, validate=validate.Range(min=1))


class ClientSchema(RequestSchema):
    error_message = "Se requiere nombre y email"

    name = fields.Str(required=True, validate=validate.Length(min=1))
    email = fields.Str(required=True, validate=validate.Length(min=1))
    phone = fields.Str(load_default=None, allow_none=True)


class HumanAgentSchema(RequestSchema):
    error_message = "Se requiere conversation_id"

    conversation_id = fields.Int(required=True, strict=True, validate=validate.Range(min=1))
    reason = fields.Str(load_default=None, allow_none=True)
