import logging
from typing import Any, Optional

from shopbridge.core.exceptions import RelayError, ValidationError
from shopbridge.relay.chatwoot import ChatwootClient
from shopbridge.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)

HANDOFF_REASONS = ("reembolso", "producto_danado", "otros")
HUMAN_LABEL = "humano"
HANDOFF_MESSAGE = (
    "La conversación ha sido transferida a un agente humano. "
    "Un miembro de nuestro equipo te atenderá pronto."
)


class HandoffService:
    """Moves a conversation from the bot to a human agent"""

    def __init__(self, relay: ChatwootClient):
        self.relay = relay

    def request_human_agent(self, conversation_id: Any, reason: Optional[str] = None) -> str:
        conversation_id = ValidationUtils.parse_positive_int(conversation_id, "Se requiere conversation_id")
        reason = ValidationUtils.clean_optional(reason)
        if reason is not None and reason not in HANDOFF_REASONS:
            raise ValidationError(f"Motivo inválido. Debe ser uno de: {', '.join(HANDOFF_REASONS)}")

        logger.info(f"Human agent requested for conversation {conversation_id} (reason={reason})")

        try:
            self.relay.update_attributes(conversation_id, {"bot": False})
        except RelayError as e:
            logger.error(f"Could not disable bot on conversation {conversation_id}: {e.message}")
            raise RelayError("Error al actualizar el estado del bot", upstream_status=e.upstream_status)

        labels = [HUMAN_LABEL] + ([reason] if reason else [])
        try:
            self.relay.add_labels(conversation_id, labels)
        except RelayError as e:
            logger.warning(f"Labels not added to conversation {conversation_id}: {e.message}")

        logger.info(f"Conversation {conversation_id} handed off to a human agent")
        return HANDOFF_MESSAGE
