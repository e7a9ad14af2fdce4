from shopbridge.relay.agent import AgentClient
from shopbridge.relay.chatwoot import CONVERSATION_STATUSES, ChatwootClient

__all__ = ["AgentClient", "ChatwootClient", "CONVERSATION_STATUSES"]
