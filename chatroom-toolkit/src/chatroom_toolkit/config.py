"""
Runtime settings for the chat-room session.

Values come from keyword arguments or, through 'ChatRoomSettings.from_env',
from environment variables:

    CHATROOM_PAGE_SIZE              messages fetched per load (default 50)
    CHATROOM_REACTION_CONCURRENCY   cap on parallel reaction fetches
                                    (unset or empty: unbounded)
"""

import os

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 50


class ChatRoomSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    reaction_fetch_concurrency: int | None = Field(default=None, gt=0)

    @classmethod
    def from_env(cls) -> "ChatRoomSettings":
        page_size = _int_from_env("CHATROOM_PAGE_SIZE")
        concurrency = _int_from_env("CHATROOM_REACTION_CONCURRENCY")
        return cls(
            page_size=page_size if page_size is not None else DEFAULT_PAGE_SIZE,
            reaction_fetch_concurrency=concurrency,
        )


def _int_from_env(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
