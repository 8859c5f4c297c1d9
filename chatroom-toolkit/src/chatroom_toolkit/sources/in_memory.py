"""
In-memory message and reaction sources.

Reference implementations of 'MessageSource' and 'ReactionSource' that keep
everything in process memory. They back the demo and the test suite, and are
handy as drop-in collaborators while the real transport is unavailable.

Both record every call they receive ('calls') and can be told to fail, which
makes them usable as spies:

    source = InMemoryReactionSource()
    source.fail_for["msg-3"] = ConnectionError("timeout")
"""

from chatroom_toolkit.data_models.message import Message, MessageKind, MessageSource
from chatroom_toolkit.data_models.reaction import Reaction, ReactionSource
from chatroom_toolkit.errors import EmptyMessageError
from chatroom_toolkit.utils.ids import generate_uid
from chatroom_toolkit.utils.time import get_current_timestamp


class InMemoryMessageSource(MessageSource):
    """
    Message store keyed by conversation.

    Attributes:
        messages: Every stored message, in insertion order.
        fail_with: When set, every call raises this exception.
        calls: (method name, arguments) for every call received.
    """

    def __init__(self, messages: list[Message] | None = None) -> None:
        self.messages: list[Message] = list(messages or [])
        self.fail_with: Exception | None = None
        self.calls: list[tuple[str, dict[str, object]]] = []

    async def fetch_messages(self, conversation_id: str, user_id: str, limit: int) -> list[Message]:
        self.calls.append(("fetch_messages", {"conversation_id": conversation_id, "user_id": user_id, "limit": limit}))
        if self.fail_with is not None:
            raise self.fail_with
        in_conversation = [message for message in self.messages if message.conversation_id == conversation_id]
        newest = sorted(in_conversation, key=lambda message: message.create_timestamp, reverse=True)[:limit]
        return newest

    async def send_message(self, conversation_id: str, sender_user_id: str, text: str) -> Message:
        self.calls.append(
            ("send_message", {"conversation_id": conversation_id, "sender_user_id": sender_user_id, "text": text})
        )
        if not text.strip():
            raise EmptyMessageError()
        if self.fail_with is not None:
            raise self.fail_with
        message = Message(
            id=generate_uid(),
            conversation_id=conversation_id,
            sender_user_id=sender_user_id,
            kind=MessageKind.TEXT,
            text=text,
            create_timestamp=get_current_timestamp(),
        )
        self.messages.append(message)
        return message


class InMemoryReactionSource(ReactionSource):
    """
    Reaction store keyed by message id.

    Attributes:
        reactions: Current reactions per message.
        fail_for: Message ids whose calls raise the mapped exception.
        fail_with: When set, every call raises this exception.
        calls: (method name, arguments) for every call received.
    """

    def __init__(self, reactions: dict[str, list[Reaction]] | None = None) -> None:
        self.reactions: dict[str, list[Reaction]] = {key: list(value) for key, value in (reactions or {}).items()}
        self.fail_for: dict[str, Exception] = {}
        self.fail_with: Exception | None = None
        self.calls: list[tuple[str, dict[str, object]]] = []

    def _check_failure(self, message_id: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        if message_id in self.fail_for:
            raise self.fail_for[message_id]

    async def fetch_reactions(self, message_id: str) -> list[Reaction]:
        self.calls.append(("fetch_reactions", {"message_id": message_id}))
        self._check_failure(message_id)
        return list(self.reactions.get(message_id, []))

    async def add_reaction(self, message_id: str, user_id: str, emoji: str) -> Reaction:
        self.calls.append(("add_reaction", {"message_id": message_id, "user_id": user_id, "emoji": emoji}))
        self._check_failure(message_id)
        reaction = Reaction(
            id=generate_uid(),
            message_id=message_id,
            user_id=user_id,
            emoji=emoji,
            create_timestamp=get_current_timestamp(),
        )
        self.reactions.setdefault(message_id, []).append(reaction)
        return reaction

    async def remove_reaction(self, message_id: str, user_id: str, emoji: str) -> None:
        self.calls.append(("remove_reaction", {"message_id": message_id, "user_id": user_id, "emoji": emoji}))
        self._check_failure(message_id)
        self.reactions[message_id] = [
            reaction
            for reaction in self.reactions.get(message_id, [])
            if not (reaction.user_id == user_id and reaction.emoji == emoji)
        ]
