"""
Shared fixtures for the chat-room toolkit tests.

Provides message and reaction factories, in-memory sources seeded with a small
conversation, and a session wired to them.
"""

import asyncio
from typing import Callable

import pytest

from chatroom_toolkit.data_models.message import Message, MessageKind
from chatroom_toolkit.data_models.reaction import Reaction
from chatroom_toolkit.session.chat_room import ChatRoomSession
from chatroom_toolkit.sources.in_memory import InMemoryMessageSource, InMemoryReactionSource

CONVERSATION_ID = "conv-1"
CURRENT_USER = "user-1"
OTHER_USER = "user-2"


def make_message(
    message_id: str,
    create_timestamp: int,
    sender_user_id: str | None = OTHER_USER,
    text: str | None = "text",
    conversation_id: str = CONVERSATION_ID,
) -> Message:
    return Message(
        id=message_id,
        conversation_id=conversation_id,
        sender_user_id=sender_user_id,
        kind=MessageKind.TEXT if sender_user_id is not None else MessageKind.SYSTEM,
        text=text,
        create_timestamp=create_timestamp,
    )


def make_reaction(message_id: str, user_id: str, emoji: str, reaction_id: str | None = None) -> Reaction:
    return Reaction(
        id=reaction_id or f"{message_id}-{user_id}-{emoji}",
        message_id=message_id,
        user_id=user_id,
        emoji=emoji,
        create_timestamp=0,
    )


class GatedMessageSource(InMemoryMessageSource):
    """Message source whose fetches block until 'release' is set."""

    def __init__(self, messages: list[Message] | None = None) -> None:
        super().__init__(messages)
        self.release = asyncio.Event()
        self.fetch_started = asyncio.Event()

    async def fetch_messages(self, conversation_id: str, user_id: str, limit: int) -> list[Message]:
        self.fetch_started.set()
        await self.release.wait()
        return await super().fetch_messages(conversation_id, user_id, limit)


class GatedReactionSource(InMemoryReactionSource):
    """Reaction source whose fetches read the store, then block until 'release' is set."""

    def __init__(self, reactions: dict[str, list[Reaction]] | None = None) -> None:
        super().__init__(reactions)
        self.release = asyncio.Event()
        self.fetch_started = asyncio.Event()

    async def fetch_reactions(self, message_id: str) -> list[Reaction]:
        snapshot = await super().fetch_reactions(message_id)
        self.fetch_started.set()
        await self.release.wait()
        return snapshot


@pytest.fixture
def message_factory() -> Callable[..., Message]:
    return make_message


@pytest.fixture
def reaction_factory() -> Callable[..., Reaction]:
    return make_reaction


@pytest.fixture
def message_source() -> InMemoryMessageSource:
    return InMemoryMessageSource(
        [
            make_message("msg-b", 2_000, sender_user_id=OTHER_USER),
            make_message("msg-a", 1_000, sender_user_id=CURRENT_USER),
            make_message("msg-c", 3_000, sender_user_id=OTHER_USER),
        ]
    )


@pytest.fixture
def reaction_source() -> InMemoryReactionSource:
    return InMemoryReactionSource()


@pytest.fixture
def session(message_source: InMemoryMessageSource, reaction_source: InMemoryReactionSource) -> ChatRoomSession:
    return ChatRoomSession(
        message_source,
        reaction_source,
        conversation_id=CONVERSATION_ID,
        current_user_id=CURRENT_USER,
    )
