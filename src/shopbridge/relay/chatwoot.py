import logging
from typing import Any, Dict, List, Optional

import requests

from shopbridge.core.config import ChatwootConfig
from shopbridge.core.exceptions import RelayError, ValidationError

logger = logging.getLogger(__name__)

CONVERSATION_STATUSES = ("open", "resolved", "pending")


class ChatwootClient:
    """
    Message relay to the Chatwoot account API.

    Every call is a single request; there are no retries. Non-2xx answers
    and transport failures raise RelayError, callers decide whether that
    is fatal.
    """

    def __init__(self, config: ChatwootConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _conversation_url(self, conversation_id: int, suffix: str = "") -> str:
        return (
            f"{self.config.base_url}/api/v1/accounts/{self.config.account_id}"
            f"/conversations/{conversation_id}{suffix}"
        )

    def _request(self, method: str, url: str, payload: Dict[str, Any], action: str) -> Any:
        if not self.enabled:
            raise RelayError("Chatwoot no está configurado")

        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "api_access_token": self.config.api_token,
                },
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Chatwoot {action} failed: {e}")
            raise RelayError(f"Error al {action}: {e}")

        if not response.ok:
            logger.error(f"Chatwoot {action} failed: {response.status_code} - {response.text}")
            raise RelayError(
                f"Error al {action}: {response.status_code} - {response.text}",
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            return None

    def send_message(self, conversation_id: int, content: str) -> Any:
        result = self._request(
            "POST",
            self._conversation_url(conversation_id, "/messages"),
            {"content": content, "message_type": "outgoing", "private": False},
            "enviar mensaje",
        )
        logger.info(f"Message sent to conversation {conversation_id}")
        return result

    def add_labels(self, conversation_id: int, labels: List[str]) -> Any:
        result = self._request(
            "POST",
            self._conversation_url(conversation_id, "/labels"),
            {"labels": labels},
            "agregar etiquetas",
        )
        logger.info(f"Labels added to conversation {conversation_id}: {', '.join(labels)}")
        return result

    def update_status(self, conversation_id: int, status: str) -> Any:
        if status not in CONVERSATION_STATUSES:
            raise ValidationError(
                f"Estado inválido. Debe ser uno de: {', '.join(CONVERSATION_STATUSES)}"
            )
        result = self._request(
            "PATCH",
            self._conversation_url(conversation_id),
            {"status": status},
            "actualizar estado",
        )
        logger.info(f"Conversation {conversation_id} status set to {status}")
        return result

    def update_attributes(self, conversation_id: int, attributes: Dict[str, Any]) -> Any:
        result = self._request(
            "POST",
            self._conversation_url(conversation_id, "/custom_attributes"),
            {"custom_attributes": attributes},
            "actualizar atributos",
        )
        logger.info(f"Conversation {conversation_id} attributes updated: {attributes}")
        return result
