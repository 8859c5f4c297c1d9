"""
Chat-room session (the single state holder for one conversation).

'ChatRoomSession' owns the message timeline, the per-message reaction cache
and the compose field of one conversation while it is on screen. It drives
the 'ChatRoomState' machine and is the only object that mutates any of these.

All state and cache mutations run under one 'asyncio.Lock' and never await
while holding it. Remote calls happen outside the lock, so a slow send does
not block a reaction update, but two updates can never interleave on the raw
collections.

Public operations at a glance:

    'load_messages'     - fetch a page, sort it, then fan out reaction fetches.
    'send_message'      - send the compose text (or an explicit text).
    'add_reaction'      - add an emoji reaction to someone else's message.
    'remove_reaction'   - remove one of the current user's reactions.
    'toggle_reaction'   - remove, add or replace depending on the current reaction.
    'refresh_reactions' - re-fetch one message's reactions.
    'reaction_summaries'- grouped, display-ready view of a message's reactions.

Failures from the collaborators never propagate out of these operations.
They move the session into 'Error' with the visible messages preserved, and
retrying the operation is always allowed. Validation errors
('OwnMessageReactionForbiddenError', unknown message ids) are raised before
any remote call. Cancellation of a load is swallowed and never reaches the
'Error' state.
"""

import asyncio
from typing import Callable

from loguru import logger

from chatroom_toolkit.config import ChatRoomSettings
from chatroom_toolkit.data_models.message import Message, MessageSource
from chatroom_toolkit.data_models.reaction import Reaction, ReactionSource, ReactionSummary
from chatroom_toolkit.data_models.state import ChatRoomState, Error, Idle, Loaded, Loading, SendingMessage
from chatroom_toolkit.errors import OwnMessageReactionForbiddenError, is_cancellation
from chatroom_toolkit.reactions.loader import ConcurrentReactionLoader
from chatroom_toolkit.reactions.synchronizer import ReactionSynchronizer

StateListener = Callable[[ChatRoomState], None]


class ChatRoomSession:
    """
    Live state of one conversation.

    Attributes:
        conversation_id: The conversation this session shows.
        current_user_id: The acting user. Reactions on their own messages are
            rejected locally.
        compose_text: Content of the compose field. Cleared as soon as a send
            of it starts and restored if that send fails.
        settings: Page size and reaction fetch concurrency.
    """

    def __init__(
        self,
        message_source: MessageSource,
        reaction_source: ReactionSource,
        conversation_id: str,
        current_user_id: str,
        settings: ChatRoomSettings | None = None,
        synchronizer: ReactionSynchronizer | None = None,
        loader: ConcurrentReactionLoader | None = None,
    ):
        self.message_source = message_source
        self.conversation_id = conversation_id
        self.current_user_id = current_user_id
        self.settings = settings or ChatRoomSettings()
        self.synchronizer = synchronizer or ReactionSynchronizer(reaction_source)
        self.aggregator = self.synchronizer.aggregator
        self.loader = loader or ConcurrentReactionLoader(
            reaction_source, max_concurrency=self.settings.reaction_fetch_concurrency
        )
        self.compose_text = ""

        self._state: ChatRoomState = Idle()
        self._state_before_load: ChatRoomState = self._state
        self._reactions: dict[str, list[Reaction]] = {}
        # Bumped on every confirmed local reaction change; fetches started
        # before a bump must not overwrite the entry.
        self._reaction_versions: dict[str, int] = {}
        self._listeners: list[StateListener] = []
        self._lock = asyncio.Lock()
        self._load_generation = 0
        self._load_task: asyncio.Task[None] | None = None

    # State access

    @property
    def state(self) -> ChatRoomState:
        return self._state

    @property
    def messages(self) -> list[Message]:
        return self._state.messages

    @property
    def can_send_message(self) -> bool:
        return bool(self.compose_text.strip()) and not self._state.is_sending

    def is_own_message(self, message: Message) -> bool:
        return message.sender_user_id == self.current_user_id

    def reactions(self, message_id: str) -> list[Reaction]:
        return list(self._reactions.get(message_id, []))

    def reaction_summaries(self, message_id: str) -> list[ReactionSummary]:
        return self.aggregator.summaries(self._reactions.get(message_id, []), self.current_user_id)

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Loading

    async def load_messages(self) -> None:
        """Load the newest page of messages, then their reactions.

        A load that is still running is cancelled and replaced by this one.
        The 'Loaded' state is published as soon as the messages arrive; the
        reaction fan-out runs afterwards and this call returns once it has
        been merged into the cache.
        """
        previous = self._load_task
        if previous is not None and not previous.done():
            logger.info(f"Superseding in-flight message load for conversation {self.conversation_id}")
            previous.cancel()

        self._load_generation += 1
        task = asyncio.create_task(self._load(self._load_generation))
        self._load_task = task
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info(f"Message load for conversation {self.conversation_id} was cancelled")

    async def close(self) -> None:
        """Cancel any in-flight load. Call when the conversation leaves the screen."""
        self._load_generation += 1
        task = self._load_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task])
        async with self._lock:
            if isinstance(self._state, Loading):
                self._set_state(self._state_before_load)
        logger.debug(f"Closed chat room session for conversation {self.conversation_id}")

    async def _load(self, generation: int) -> None:
        async with self._lock:
            if not isinstance(self._state, Loading):
                self._state_before_load = self._state
            self._set_state(Loading())

        try:
            fetched = await self.message_source.fetch_messages(
                conversation_id=self.conversation_id,
                user_id=self.current_user_id,
                limit=self.settings.page_size,
            )
        except asyncio.CancelledError:
            await self._undo_loading(generation)
            raise
        except Exception as exc:
            if is_cancellation(exc):
                logger.info(f"Message fetch for conversation {self.conversation_id} was cancelled by the transport")
                await self._undo_loading(generation)
                return
            logger.error(f"Failed to load messages for conversation {self.conversation_id}: {exc}")
            async with self._lock:
                if generation == self._load_generation:
                    self._set_state(Error(message=f"Failed to load messages: {exc}", timeline=[]))
            return

        messages = sorted(fetched, key=lambda message: message.create_timestamp)
        async with self._lock:
            if generation != self._load_generation:
                return
            self._set_state(Loaded(timeline=messages))
            versions = dict(self._reaction_versions)
        logger.debug(f"Loaded {len(messages)} messages for conversation {self.conversation_id}")

        loaded_reactions = await self.loader.load([message.id for message in messages])
        async with self._lock:
            if generation != self._load_generation:
                return
            visible_ids = {message.id for message in messages}
            self._reactions = {
                message_id: reactions
                for message_id, reactions in self._reactions.items()
                if message_id in visible_ids
            }
            for message_id, reactions in loaded_reactions.items():
                if self._reaction_versions.get(message_id, 0) != versions.get(message_id, 0):
                    logger.debug(f"Dropping stale reaction fetch for message {message_id}")
                    continue
                self._reactions[message_id] = reactions

    async def _undo_loading(self, generation: int) -> None:
        async with self._lock:
            if generation == self._load_generation and isinstance(self._state, Loading):
                self._set_state(self._state_before_load)

    # Sending

    async def send_message(self, text: str | None = None) -> Message | None:
        """Send 'text', or the compose text when omitted.

        Blank text is ignored. When sending the compose text, the compose field
        is cleared before the remote call and gets the text back if the send
        fails. An explicit text leaves the compose field alone.

        Returns:
            The server-confirmed message, or None if nothing was sent.
        """
        from_compose = text is None
        text_to_send = self.compose_text if text is None else text
        if not text_to_send.strip():
            logger.debug("Ignoring send of blank message")
            return None

        async with self._lock:
            if from_compose:
                self.compose_text = ""
            self._set_state(SendingMessage(timeline=self._state.messages))

        try:
            message = await self.message_source.send_message(
                conversation_id=self.conversation_id,
                sender_user_id=self.current_user_id,
                text=text_to_send,
            )
        except asyncio.CancelledError:
            async with self._lock:
                if from_compose:
                    self.compose_text = text_to_send
                self._set_state(Loaded(timeline=self._state.messages))
            raise
        except Exception as exc:
            async with self._lock:
                if from_compose:
                    self.compose_text = text_to_send
                if is_cancellation(exc):
                    logger.info("Message send was cancelled by the transport")
                    self._set_state(Loaded(timeline=self._state.messages))
                else:
                    logger.error(f"Failed to send message to conversation {self.conversation_id}: {exc}")
                    self._set_state(Error(message=f"Failed to send message: {exc}", timeline=self._state.messages))
            return None

        async with self._lock:
            # Appended as-is; server timestamps are assumed monotonic per conversation.
            self._set_state(Loaded(timeline=[*self._state.messages, message]))
        logger.debug(f"Sent message {message.id} to conversation {self.conversation_id}")
        return message

    # Reactions

    async def add_reaction(self, message_id: str, emoji: str) -> Reaction | None:
        self._check_can_react(message_id)
        try:
            reaction = await self.synchronizer.add(message_id, self.current_user_id, emoji)
        except Exception as exc:
            await self._reaction_failed(exc)
            return None
        async with self._lock:
            self._reactions.setdefault(message_id, []).append(reaction)
            self._bump_reaction_version(message_id)
        return reaction

    async def remove_reaction(self, message_id: str, emoji: str) -> None:
        self._check_can_react(message_id)
        await self._remove(message_id, emoji)

    async def toggle_reaction(self, message_id: str, emoji: str) -> Reaction | None:
        """Apply a tap on 'emoji' for 'message_id'.

        Tapping the emoji the user already reacted with removes it. Any other
        emoji replaces the user's current reaction, or adds one if there is
        none. If a replace fails the message's reactions are re-fetched, as
        the old reaction may already be gone.

        Returns:
            The new reaction, or None when the reaction was removed or the
            operation failed.
        """
        self._check_can_react(message_id)
        existing = self.aggregator.own_reaction(self._reactions.get(message_id, []), self.current_user_id)
        if existing is not None and existing.emoji == emoji:
            await self._remove(message_id, emoji)
            return None

        old_emoji = existing.emoji if existing is not None else None
        try:
            reaction = await self.synchronizer.replace(message_id, self.current_user_id, old_emoji, emoji)
        except Exception as exc:
            await self._reaction_failed(exc)
            if old_emoji is not None and not is_cancellation(exc):
                await self.refresh_reactions(message_id)
            return None

        async with self._lock:
            self._reactions[message_id] = [
                current
                for current in self._reactions.get(message_id, [])
                if not (current.user_id == self.current_user_id and current.emoji == old_emoji)
            ] + [reaction]
            self._bump_reaction_version(message_id)
        return reaction

    async def refresh_reactions(self, message_id: str) -> bool:
        """Re-fetch one message's reactions and replace its cache entry.

        A reaction change confirmed while the fetch was in flight wins over
        the fetched list.

        Returns:
            True if the cache entry was refreshed.
        """
        version = self._reaction_versions.get(message_id, 0)
        try:
            reactions = await self.synchronizer.fetch(message_id)
        except Exception as exc:
            logger.warning(f"Could not refresh reactions for message {message_id}: {exc}")
            return False
        async with self._lock:
            if self._reaction_versions.get(message_id, 0) != version:
                logger.debug(f"Dropping stale reaction refresh for message {message_id}")
                return False
            self._reactions[message_id] = list(reactions)
        return True

    def _bump_reaction_version(self, message_id: str) -> None:
        self._reaction_versions[message_id] = self._reaction_versions.get(message_id, 0) + 1

    async def _remove(self, message_id: str, emoji: str) -> None:
        try:
            await self.synchronizer.remove(message_id, self.current_user_id, emoji)
        except Exception as exc:
            await self._reaction_failed(exc)
            return
        async with self._lock:
            self._reactions[message_id] = [
                reaction
                for reaction in self._reactions.get(message_id, [])
                if not (reaction.user_id == self.current_user_id and reaction.emoji == emoji)
            ]
            self._bump_reaction_version(message_id)

    def _check_can_react(self, message_id: str) -> None:
        message = next((message for message in self._state.messages if message.id == message_id), None)
        if message is None:
            raise ValueError(f"Message with id {message_id} not found")
        if self.is_own_message(message):
            raise OwnMessageReactionForbiddenError(message_id)

    async def _reaction_failed(self, exc: Exception) -> None:
        if is_cancellation(exc):
            logger.info(f"Reaction update was cancelled: {exc}")
            return
        logger.error(f"Reaction update failed: {exc}")
        async with self._lock:
            self._set_state(Error(message=f"Failed to update reaction: {exc}", timeline=self._state.messages))

    # State publication

    def _set_state(self, state: ChatRoomState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                logger.warning(f"State listener {listener!r} raised: {exc}")
