"""
Reaction data models and reaction source interface.

A 'Reaction' is one (user, emoji) annotation on a message. Reactions are
created by an add and destroyed by a remove; they are never edited in place,
so changing emoji is a remove followed by an add.

'ReactionSummary' is derived data. It is rebuilt from the raw reaction list
every time it is read and is never stored, which keeps it from drifting away
from the reactions it describes.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class Reaction(BaseModel):
    """A user's emoji reaction attached to a message."""

    model_config = ConfigDict(frozen=True)

    id: str
    message_id: str
    user_id: str
    emoji: str
    create_timestamp: int


class ReactionSummary(BaseModel):
    """
    All reactions of one emoji on a message, grouped for display.

    'user_ids' keeps the order in which users first reacted. 'includes_current_user'
    is resolved against the user the summary was computed for, so the UI can
    highlight the chip without another lookup.
    """

    model_config = ConfigDict(frozen=True)

    emoji: str
    count: int
    user_ids: list[str] = Field(default_factory=list)
    includes_current_user: bool = False

    def has_user(self, user_id: str) -> bool:
        return user_id in self.user_ids


class ReactionSource(ABC):
    """Remote store for message reactions."""

    @abstractmethod
    async def fetch_reactions(self, message_id: str) -> list[Reaction]:
        pass

    @abstractmethod
    async def add_reaction(self, message_id: str, user_id: str, emoji: str) -> Reaction:
        pass

    @abstractmethod
    async def remove_reaction(self, message_id: str, user_id: str, emoji: str) -> None:
        """Remove the user's reaction with 'emoji'. Removing an absent reaction is not an error."""
        pass
