from chatroom_toolkit.sources.in_memory import InMemoryMessageSource, InMemoryReactionSource

__all__ = ["InMemoryMessageSource", "InMemoryReactionSource"]
