import logging
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from shopbridge.core.config import AgentConfig
from shopbridge.core.exceptions import RelayError
from shopbridge.schemas.chatwoot import AgentReply

logger = logging.getLogger(__name__)


class AgentClient:
    """Forwards chat events to the external conversational agent"""

    def __init__(self, config: AgentConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def ask(self, payload: Dict[str, Any]) -> AgentReply:
        """POST the raw webhook payload and return the agent's answer"""
        if not self.config.webhook_url:
            raise RelayError("No hay un agente configurado")

        try:
            response = self.session.request(
                "POST",
                self.config.webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            raise RelayError(f"Error al llamar al agente: {e}")

        if not response.ok:
            raise RelayError(
                f"Error al llamar al agente: {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            return AgentReply.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise RelayError(f"Respuesta inválida del agente: {e}")
