"""
Message data model and message source interface.

Messages are immutable once created. They come into existence either through
'MessageSource.send_message', which returns the server-confirmed record with
its assigned identity and timestamp, or as part of a 'fetch_messages'
response.

'sender_user_id' is None for system events (a participant joining, a title
change) which carry their tag in 'system_event' instead of a text body.

The 'MessageSource' ABC is the collaborator the chat-room session talks to.
Concrete implementations live outside this package apart from the reference
'InMemoryMessageSource'.
"""

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class MessageKind(StrEnum):
    TEXT = "text"
    SYSTEM = "system"


class Message(BaseModel):
    """A single message within a conversation."""

    model_config = ConfigDict(frozen=True)

    id: str
    conversation_id: str
    sender_user_id: str | None
    kind: MessageKind = MessageKind.TEXT
    text: str | None = None
    create_timestamp: int
    reply_to_message_id: str | None = None
    system_event: str | None = None


class MessageSource(ABC):
    """Remote store for the messages of a conversation."""

    @abstractmethod
    async def fetch_messages(self, conversation_id: str, user_id: str, limit: int) -> list[Message]:
        """Return up to 'limit' messages of the conversation, in any order."""
        pass

    @abstractmethod
    async def send_message(self, conversation_id: str, sender_user_id: str, text: str) -> Message:
        pass
