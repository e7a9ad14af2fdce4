import logging

from flask import Blueprint

from shopbridge.routes.utils import get_service, load_body, success_response
from shopbridge.schemas.requests import AddCartItemSchema, UpdateCartItemSchema
from shopbridge.services.cart_service import (
    CART_CREATED_MESSAGE,
    ITEM_UPDATED_MESSAGE,
    CartService,
)

logger = logging.getLogger(__name__)

carts_bp = Blueprint("carts", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()


@carts_bp.route("", methods=["POST"])
def create_cart():
    """Create an empty anonymous cart."""
    cart = get_service(CartService).create_cart()
    return success_response(cart.to_dict(), CART_CREATED_MESSAGE, 201)


@carts_bp.route("/<cart_id>", methods=["GET"])
def get_cart(cart_id: str):
    view = get_service(CartService).get_cart(cart_id)
    return success_response(view.to_dict())


@carts_bp.route("/<cart_id>/items", methods=["POST"])
def add_cart_item(cart_id: str):
    """
    Add a variant to the cart, or increment its quantity if already present.

    201 when a new line was inserted, 200 when an existing line was merged.
    """
    data = load_body(_add_schema)
    service = get_service(CartService)

    result = service.add_to_cart(
        cart_id,
        data["product_variant_id"],
        data["qty"],
        conversation_id=data.get("conversation_id"),
    )

    status = 201 if result.created else 200
    return success_response(result.item.to_dict(), service.add_message(result), status)


@carts_bp.route("/<cart_id>/items/<item_id>", methods=["PATCH"])
def update_cart_item(cart_id: str, item_id: str):
    data = load_body(_update_schema)
    item = get_service(CartService).update_cart_item(cart_id, item_id, data["qty"])
    return success_response(item.to_dict(), ITEM_UPDATED_MESSAGE)


@carts_bp.route("/<cart_id>/items/<item_id>", methods=["DELETE"])
def remove_cart_item(cart_id: str, item_id: str):
    message = get_service(CartService).remove_from_cart(cart_id, item_id)
    return success_response(message=message)
