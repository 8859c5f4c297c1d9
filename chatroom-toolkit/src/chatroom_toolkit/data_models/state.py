r"""
Chat-room state machine.

'ChatRoomState' is the single source of truth for what the timeline shows. It
is a tagged union rather than a set of independent flags, so states such as
"loading and showing an error" cannot be represented.

Every variant after the first successful load carries the last known good
message list. A failed send or a failed reaction update therefore never
blanks the timeline: the UI keeps rendering 'state.messages' and shows the
error on top.

    Idle -> Loading -> Loaded(m) -> SendingMessage(m) -> Loaded(m + [new])
                   \-> Error(reason, [])            \-> Error(reason, m)
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from chatroom_toolkit.data_models.message import Message


class _StateBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def messages(self) -> list[Message]:
        return []

    @property
    def is_loading(self) -> bool:
        return False

    @property
    def is_sending(self) -> bool:
        return False

    @property
    def error_message(self) -> str | None:
        return None

    @property
    def show_error(self) -> bool:
        return self.error_message is not None


class Idle(_StateBase):
    kind: Literal["idle"] = "idle"


class Loading(_StateBase):
    kind: Literal["loading"] = "loading"

    @property
    def is_loading(self) -> bool:
        return True


class Loaded(_StateBase):
    kind: Literal["loaded"] = "loaded"
    timeline: list[Message] = Field(default_factory=list)

    @property
    def messages(self) -> list[Message]:
        return list(self.timeline)


class SendingMessage(_StateBase):
    """A send is in flight; 'timeline' is what was visible when it started."""

    kind: Literal["sending_message"] = "sending_message"
    timeline: list[Message] = Field(default_factory=list)

    @property
    def messages(self) -> list[Message]:
        return list(self.timeline)

    @property
    def is_sending(self) -> bool:
        return True


class Error(_StateBase):
    kind: Literal["error"] = "error"
    message: str
    timeline: list[Message] = Field(default_factory=list)

    @property
    def messages(self) -> list[Message]:
        return list(self.timeline)

    @property
    def error_message(self) -> str | None:
        return self.message


ChatRoomState = Annotated[
    Union[Idle, Loading, Loaded, SendingMessage, Error],
    Field(discriminator="kind"),
]
