from chatroom_toolkit.data_models.message import Message, MessageKind, MessageSource
from chatroom_toolkit.data_models.reaction import Reaction, ReactionSource, ReactionSummary
from chatroom_toolkit.data_models.state import ChatRoomState, Error, Idle, Loaded, Loading, SendingMessage

__all__ = [
    "ChatRoomState",
    "Error",
    "Idle",
    "Loaded",
    "Loading",
    "Message",
    "MessageKind",
    "MessageSource",
    "Reaction",
    "ReactionSource",
    "ReactionSummary",
    "SendingMessage",
]
