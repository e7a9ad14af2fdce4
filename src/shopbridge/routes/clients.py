from flask import Blueprint, jsonify

from shopbridge.routes.utils import get_service, load_body
from shopbridge.schemas.requests import ClientSchema
from shopbridge.services.client_service import ClientService

clients_bp = Blueprint("clients", __name__)

_client_schema = ClientSchema()


@clients_bp.route("/get-or-create", methods=["POST"])
def get_or_create_client():
    """Resolve the client by e-mail and return it with its active cart."""
    data = load_body(_client_schema)
    session = get_service(ClientService).get_or_create_client(
        data["name"], data["email"], data.get("phone")
    )
    return jsonify(session.to_dict()), 200
