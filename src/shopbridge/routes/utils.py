import logging
from typing import Any, Dict, Optional, Type, TypeVar

from flask import current_app, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError

from shopbridge.core.dependencies import DependencyContainer
from shopbridge.core.exceptions import ValidationError
from shopbridge.schemas.requests import RequestSchema

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTAINER_KEY = "shopbridge"


def success_response(data: Any = None, message: Optional[str] = None, status: int = 200, **extra: Any):
    """Success envelope: {message?, ...extra, data?}"""
    body: Dict[str, Any] = {}
    if message is not None:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def load_body(schema: RequestSchema) -> Dict[str, Any]:
    """Validate the JSON body against a schema; any failure is a 400 with the schema's message"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError(schema.error_message)

    try:
        return schema.load(payload)
    except MarshmallowValidationError as err:
        logger.warning(f"Rejected request body on {request.path}: {err.messages}")
        raise ValidationError(schema.error_message)


def get_container() -> DependencyContainer:
    return current_app.extensions[CONTAINER_KEY]


def get_service(service_class: Type[T]) -> T:
    return get_container().get(service_class)
