"""
Chat-room session engine.

Owns one conversation's live timeline and reaction state, drives it through
an explicit loading/sending/error state machine and reconciles concurrently
fetched reactions with the user's own reaction changes:

    from chatroom_toolkit import ChatRoomSession, ChatRoomSettings
    from chatroom_toolkit.sources import InMemoryMessageSource, InMemoryReactionSource

    session = ChatRoomSession(InMemoryMessageSource(), InMemoryReactionSource(), "conv-1", "user-1")
    await session.load_messages()
"""

from chatroom_toolkit.config import ChatRoomSettings
from chatroom_toolkit.errors import (
    ChatRoomError,
    EmptyMessageError,
    OwnMessageReactionForbiddenError,
    RemoteFailureError,
    RequestCancelledError,
    is_cancellation,
)
from chatroom_toolkit.session.chat_room import ChatRoomSession

__all__ = [
    "ChatRoomError",
    "ChatRoomSession",
    "ChatRoomSettings",
    "EmptyMessageError",
    "OwnMessageReactionForbiddenError",
    "RemoteFailureError",
    "RequestCancelledError",
    "is_cancellation",
]
