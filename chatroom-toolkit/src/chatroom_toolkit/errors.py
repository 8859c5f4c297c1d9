"""
Error taxonomy of the chat-room session.

Validation errors ('EmptyMessageError', 'OwnMessageReactionForbiddenError')
are raised before any remote call. 'RemoteFailureError' wraps whatever a
collaborator raised and is what ends up as the text of the 'Error' state.

Cancellation is not an error kind of its own: a superseded or torn-down load
raises 'asyncio.CancelledError', and transports that report cancelled requests
through their own exception can raise 'RequestCancelledError'. Both are
recognised by 'is_cancellation' and are never shown to the user.
"""

import asyncio


class ChatRoomError(Exception):
    """Base class for errors raised by the chat-room toolkit."""


class EmptyMessageError(ChatRoomError):
    def __init__(self) -> None:
        super().__init__("Message text must not be empty")


class OwnMessageReactionForbiddenError(ChatRoomError):
    def __init__(self, message_id: str) -> None:
        super().__init__(f"Reacting to your own message is not allowed (message {message_id})")
        self.message_id = message_id


class RemoteFailureError(ChatRoomError):
    """A fetch, send or reaction call failed on the remote side."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class RequestCancelledError(ChatRoomError):
    """Raised by a transport when an in-flight request was cancelled."""


def is_cancellation(exc: BaseException) -> bool:
    """True for cancellation signals, including ones wrapped as the cause of another error."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, (asyncio.CancelledError, RequestCancelledError)):
            return True
        seen.add(id(current))
        current = current.__cause__
    return False
