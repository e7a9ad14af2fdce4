from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PLAIN_MESSAGE_EVENT = "message_created"
AUTOMATION_MESSAGE_EVENT = "automation_event.message_created"
AUTOMATION_INCOMING = 0


class WebhookSender(BaseModel):
    """Contact that wrote the message"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class WebhookConversation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    status: Optional[str] = None


class AutomationMessage(BaseModel):
    """Message entry of an automation-rule payload; message_type 0 is incoming"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    content: Optional[str] = None
    message_type: Optional[Union[int, str]] = None
    sender: Optional[WebhookSender] = None


class WebhookMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sender: Optional[WebhookSender] = None


class IncomingMessage(BaseModel):
    """A customer message worth acting on"""
    conversation_id: int
    content: str
    sender_name: str = "Cliente"


class ChatwootEvent(BaseModel):
    """
    Inbound Chatwoot webhook.

    Two shapes arrive on the same endpoint: the account webhook
    (event=message_created, message_type="incoming", conversation.id) and
    the automation-rule webhook (event=automation_event.message_created,
    conversation id in `id`, messages[0].message_type == 0).
    """
    model_config = ConfigDict(extra="ignore")

    event: str = ""
    id: Optional[int] = None
    message_type: Optional[Union[int, str]] = None
    content: Optional[str] = None
    conversation: Optional[WebhookConversation] = None
    sender: Optional[WebhookSender] = None
    messages: List[AutomationMessage] = Field(default_factory=list)
    meta: Optional[WebhookMeta] = None

    def incoming_message(self) -> Optional[IncomingMessage]:
        """The incoming customer message, or None if the event should be ignored"""
        if self.event == PLAIN_MESSAGE_EVENT:
            if self.message_type != "incoming":
                return None
            conversation_id = self.conversation.id if self.conversation else None
            content = self.content
            sender = self.sender
        elif self.event == AUTOMATION_MESSAGE_EVENT:
            message = self.messages[0] if self.messages else None
            if message is None or message.message_type != AUTOMATION_INCOMING:
                return None
            conversation_id = self.id
            content = message.content
            sender = message.sender or (self.meta.sender if self.meta else None)
        else:
            return None

        if not conversation_id or not content:
            return None

        return IncomingMessage(
            conversation_id=conversation_id,
            content=content,
            sender_name=(sender.name if sender and sender.name else "Cliente"),
        )


class AgentReply(BaseModel):
    """Answer returned by the external conversational agent"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    answer: str
    conversation_id: Optional[Union[str, int]] = Field(default=None, alias="conversationId")
    visitor_id: Optional[Union[str, int]] = Field(default=None, alias="visitorId")
    message_id: Optional[Union[str, int]] = Field(default=None, alias="messageId")
