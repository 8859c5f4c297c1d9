"""
Concurrent reaction fetching for a page of messages.

'ConcurrentReactionLoader' issues one fetch per message and dispatches them
together with 'asyncio.gather', so a page of fifty messages costs roughly one
round-trip instead of fifty. A failed fetch is logged and its message is left
out of the result; the rest of the batch is unaffected. Cancellation is the
exception: cancelling the batch cancels every pending fetch and propagates.

By default the fan-out is unbounded. 'max_concurrency' caps the number of
fetches in flight at once without changing the result.
"""

import asyncio
from typing import Sequence

from loguru import logger

from chatroom_toolkit.data_models.reaction import Reaction, ReactionSource
from chatroom_toolkit.errors import is_cancellation


class ConcurrentReactionLoader:
    """
    Fan-out/fan-in loader for message reactions.

    Attributes:
        reaction_source: The collaborator every fetch goes through.
        max_concurrency: Upper bound on simultaneous fetches. 'None' means
            all fetches start at once.
    """

    def __init__(self, reaction_source: ReactionSource, max_concurrency: int | None = None) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer or None")
        self.reaction_source = reaction_source
        self.max_concurrency = max_concurrency

    async def load(self, message_ids: Sequence[str]) -> dict[str, list[Reaction]]:
        """Fetch reactions for every id in 'message_ids'.

        Returns:
            A mapping from message id to its reactions, containing only the
            ids whose fetch succeeded. Duplicate ids are fetched once.
        """
        unique_ids = list(dict.fromkeys(message_ids))
        if not unique_ids:
            return {}

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        results = await asyncio.gather(*(self._fetch_one(message_id, semaphore) for message_id in unique_ids))

        merged: dict[str, list[Reaction]] = {}
        for message_id, reactions in results:
            if reactions is not None:
                merged[message_id] = reactions

        failed = len(unique_ids) - len(merged)
        if failed:
            logger.warning(f"Reactions unavailable for {failed} of {len(unique_ids)} messages")
        else:
            logger.debug(f"Loaded reactions for {len(merged)} messages")
        return merged

    async def _fetch_one(
        self, message_id: str, semaphore: asyncio.Semaphore | None
    ) -> tuple[str, list[Reaction] | None]:
        try:
            if semaphore is None:
                reactions = await self.reaction_source.fetch_reactions(message_id)
            else:
                async with semaphore:
                    reactions = await self.reaction_source.fetch_reactions(message_id)
        except Exception as exc:
            if is_cancellation(exc):
                raise
            logger.warning(f"Failed to fetch reactions for message {message_id}: {exc}")
            return message_id, None
        return message_id, list(reactions)
