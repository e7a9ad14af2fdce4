import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from shopbridge.core.config import WebhookConfig
from shopbridge.core.exceptions import BaseAPIException
from shopbridge.relay.agent import AgentClient
from shopbridge.relay.chatwoot import ChatwootClient
from shopbridge.schemas.chatwoot import ChatwootEvent

logger = logging.getLogger(__name__)


class WebhookService:
    """
    Inbound chat events.

    Every outcome maps to a short acknowledgement; nothing raised by the
    relay or the agent escapes, so the chat platform never sees a failure
    and never retries delivery.
    """

    def __init__(self, config: WebhookConfig, relay: ChatwootClient, agent: Optional[AgentClient] = None):
        self.config = config
        self.relay = relay
        self.agent = agent

    def handle(self, payload: Any) -> str:
        try:
            event = ChatwootEvent.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning(f"Malformed webhook payload: {e.error_count()} error(s)")
            return "OK - Evento inválido"

        logger.info(f"Chatwoot webhook received: {event.event}")

        message = event.incoming_message()
        if message is None:
            logger.info("Event ignored (not an incoming message)")
            return "OK - Evento ignorado"

        logger.info(
            f"Message from {message.sender_name} in conversation "
            f"{message.conversation_id}: {message.content}"
        )

        try:
            if self.config.mode == "forward":
                return self._forward(payload, message.conversation_id)
            if self.config.mode == "static":
                self.relay.send_message(message.conversation_id, self.config.static_reply)
                return "OK"
        except BaseAPIException as e:
            logger.error(f"Webhook handling failed for conversation {message.conversation_id}: {e.message}")
            return "OK - Error manejado"

        return "OK - Evento registrado"

    def _forward(self, payload: Any, conversation_id: int) -> str:
        if self.agent is None:
            logger.error("Forward mode without an agent client")
            return "OK - Error manejado"

        reply = self.agent.ask(payload)
        logger.info(f"Agent answered conversation {conversation_id}")
        self.relay.send_message(conversation_id, reply.answer)
        return "OK"
