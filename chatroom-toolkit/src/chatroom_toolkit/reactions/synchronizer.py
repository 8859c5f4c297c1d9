"""
Remote mutation of a single message's reaction set.

'ReactionSynchronizer' is a thin layer over a 'ReactionSource'. Every
collaborator exception is re-raised as 'RemoteFailureError' with the original
exception chained, except cancellation, which propagates untouched.

'replace' is the only composite operation. It removes the old emoji and then
adds the new one. The two calls are not atomic: when the remove succeeds and
the add fails, the user is left with no reaction on the message and no
rollback is attempted. Treat a failed replace as "state possibly changed" and
re-fetch the message's reactions.
"""

from typing import NoReturn, Sequence

from loguru import logger

from chatroom_toolkit.data_models.reaction import Reaction, ReactionSource, ReactionSummary
from chatroom_toolkit.errors import RemoteFailureError, is_cancellation
from chatroom_toolkit.reactions.aggregator import ReactionAggregator


class ReactionSynchronizer:
    def __init__(self, reaction_source: ReactionSource, aggregator: ReactionAggregator | None = None):
        self.reaction_source = reaction_source
        self.aggregator = aggregator or ReactionAggregator()

    async def add(self, message_id: str, user_id: str, emoji: str) -> Reaction:
        try:
            reaction = await self.reaction_source.add_reaction(message_id=message_id, user_id=user_id, emoji=emoji)
        except Exception as exc:
            _raise_remote_failure(exc, f"add {emoji!r} to message {message_id}")
        logger.debug(f"Added reaction {emoji!r} by {user_id} to message {message_id}")
        return reaction

    async def remove(self, message_id: str, user_id: str, emoji: str) -> None:
        try:
            await self.reaction_source.remove_reaction(message_id=message_id, user_id=user_id, emoji=emoji)
        except Exception as exc:
            _raise_remote_failure(exc, f"remove {emoji!r} from message {message_id}")
        logger.debug(f"Removed reaction {emoji!r} by {user_id} from message {message_id}")

    async def replace(self, message_id: str, user_id: str, old_emoji: str | None, new_emoji: str) -> Reaction:
        if old_emoji is not None:
            await self.remove(message_id, user_id, old_emoji)
        try:
            return await self.add(message_id, user_id, new_emoji)
        except RemoteFailureError:
            if old_emoji is not None:
                logger.warning(
                    f"Replace on message {message_id} removed {old_emoji!r} but failed to add {new_emoji!r}; "
                    "the user has no reaction until reactions are re-fetched"
                )
            raise

    async def fetch(self, message_id: str) -> list[Reaction]:
        try:
            return await self.reaction_source.fetch_reactions(message_id)
        except Exception as exc:
            _raise_remote_failure(exc, f"fetch reactions of message {message_id}")

    def summaries(self, reactions: Sequence[Reaction], current_user_id: str) -> list[ReactionSummary]:
        return self.aggregator.summaries(reactions, current_user_id)


def _raise_remote_failure(exc: Exception, action: str) -> NoReturn:
    if is_cancellation(exc) or isinstance(exc, RemoteFailureError):
        raise exc
    raise RemoteFailureError(f"Could not {action}: {exc}") from exc
