"""
End-to-end walkthrough of a chat-room session against in-memory sources.

Each step is a separate function so it can be run and inspected on its own.
loguru logs the session state after every step.

Steps at a glance:
    1  seed_sources()      - Build in-memory sources with a short conversation
    2  load()              - Load messages and their reactions
    3  send()              - Send a message from the compose field
    4  react()             - Toggle reactions and log the summaries

Configuration comes from the environment (see 'ChatRoomSettings.from_env'),
plus:
    DEMO_TEXT   text to send in step 3 (default "hello")
    DEMO_EMOJI  emoji to react with in step 4 (default "👍")

Usage:
    python -m chatroom_toolkit.demo
    DEMO_TEXT="see you tomorrow" CHATROOM_REACTION_CONCURRENCY=2 python -m chatroom_toolkit.demo
"""

import asyncio
import os

from loguru import logger

from chatroom_toolkit.config import ChatRoomSettings
from chatroom_toolkit.data_models.message import Message, MessageKind
from chatroom_toolkit.data_models.reaction import Reaction
from chatroom_toolkit.session.chat_room import ChatRoomSession
from chatroom_toolkit.sources.in_memory import InMemoryMessageSource, InMemoryReactionSource

CONVERSATION_ID = "conv-demo"
CURRENT_USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


def seed_sources() -> tuple[InMemoryMessageSource, InMemoryReactionSource]:
    messages = [
        Message(
            id="msg-2",
            conversation_id=CONVERSATION_ID,
            sender_user_id=OTHER_USER_ID,
            text="Hi there!",
            create_timestamp=2_000,
        ),
        Message(
            id="msg-0",
            conversation_id=CONVERSATION_ID,
            sender_user_id=None,
            kind=MessageKind.SYSTEM,
            system_event="conversation_created",
            create_timestamp=0,
        ),
        Message(
            id="msg-1",
            conversation_id=CONVERSATION_ID,
            sender_user_id=CURRENT_USER_ID,
            text="Hello!",
            create_timestamp=1_000,
        ),
    ]
    reactions = {
        "msg-2": [
            Reaction(id="r-1", message_id="msg-2", user_id="user-carol", emoji="❤️", create_timestamp=2_500),
        ]
    }
    return InMemoryMessageSource(messages), InMemoryReactionSource(reactions)


def log_state(session: ChatRoomSession) -> None:
    state = session.state
    logger.info(f"state={state.kind!r}  messages={len(state.messages)}  error={state.error_message!r}")


async def load(session: ChatRoomSession) -> None:
    await session.load_messages()
    log_state(session)
    for message in session.messages:
        logger.info(f"  [{message.create_timestamp}] {message.sender_user_id or 'system'}: {message.text or message.system_event}")


async def send(session: ChatRoomSession, text: str) -> Message | None:
    session.compose_text = text
    message = await session.send_message()
    log_state(session)
    return message


async def react(session: ChatRoomSession, message_id: str, emoji: str) -> None:
    await session.toggle_reaction(message_id, emoji)
    for summary in session.reaction_summaries(message_id):
        marker = "*" if summary.includes_current_user else " "
        logger.info(f"  {marker} {summary.emoji} x{summary.count} {summary.user_ids}")


async def run_demo(text: str = "hello", emoji: str = "👍", settings: ChatRoomSettings | None = None) -> ChatRoomSession:
    logger.info("Starting chat room demo")
    message_source, reaction_source = seed_sources()
    session = ChatRoomSession(
        message_source,
        reaction_source,
        conversation_id=CONVERSATION_ID,
        current_user_id=CURRENT_USER_ID,
        settings=settings or ChatRoomSettings.from_env(),
    )
    session.add_listener(lambda state: logger.debug(f"-> {state.kind}"))

    await load(session)
    await send(session, text)
    await react(session, "msg-2", emoji)
    await react(session, "msg-2", "❤️")

    await session.close()
    logger.info("Chat room demo done")
    return session


if __name__ == "__main__":
    asyncio.run(
        run_demo(
            text=os.getenv("DEMO_TEXT", "hello"),
            emoji=os.getenv("DEMO_EMOJI", "👍"),
        )
    )
