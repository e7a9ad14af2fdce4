import logging

from flask import Blueprint, Response, request

from shopbridge.routes.utils import get_service, load_body, success_response
from shopbridge.schemas.requests import HumanAgentSchema
from shopbridge.services.handoff_service import HandoffService
from shopbridge.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)

chatwoot_bp = Blueprint("chatwoot", __name__)

_human_schema = HumanAgentSchema()


@chatwoot_bp.route("/webhook", methods=["POST"])
def webhook():
    """
    Inbound Chatwoot events.

    Always answers 200 with a plain-text acknowledgement so Chatwoot never
    retries delivery; failures are only visible in the logs.
    """
    payload = request.get_json(silent=True)
    try:
        ack = get_service(WebhookService).handle(payload)
    except Exception:
        logger.exception("Unexpected error while handling Chatwoot webhook")
        ack = "OK - Error interno manejado"
    return Response(ack, status=200, mimetype="text/plain")


@chatwoot_bp.route("/request-human", methods=["POST"])
def request_human():
    data = load_body(_human_schema)
    message = get_service(HandoffService).request_human_agent(
        data["conversation_id"], data.get("reason")
    )
    return success_response(message=message)
