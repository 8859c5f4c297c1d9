from chatroom_toolkit.session.chat_room import ChatRoomSession

__all__ = ["ChatRoomSession"]
