from chatroom_toolkit.reactions.aggregator import ReactionAggregator
from chatroom_toolkit.reactions.loader import ConcurrentReactionLoader
from chatroom_toolkit.reactions.synchronizer import ReactionSynchronizer

__all__ = [
    "ConcurrentReactionLoader",
    "ReactionAggregator",
    "ReactionSynchronizer",
]
