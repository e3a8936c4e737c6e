"""
In-memory storage for chat exchanges.

Thread Safety:
    All operations use an asyncio.Lock to ensure safe access to shared state
    under concurrent request handling in the FastAPI application.
"""

import asyncio
import uuid
from typing import Optional

from legalswami.models import ChatRecord, utcnow


class ChatStore:
    """
    Store for chat records keyed by id.

    Records are copied on the way in and out, so callers never mutate
    stored state without going through save().

    Attributes:
        _lock: Instance-level lock for all state operations
        _chats: Chat records by id
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._chats: dict[str, ChatRecord] = {}

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    async def reset(self) -> None:
        """Remove every stored chat. Used by tests."""
        async with self._lock:
            self._chats.clear()

    async def save(self, chat: ChatRecord) -> ChatRecord:
        """
        Insert or update a chat.

        Updates refresh updated_at; created_at is kept from the first save.

        Args:
            chat: Record to store

        Returns:
            ChatRecord: The stored copy
        """
        async with self._lock:
            existing = self._chats.get(chat.id)
            if existing is not None:
                chat = chat.model_copy(update={"created_at": existing.created_at, "updated_at": utcnow()})
            self._chats[chat.id] = chat.model_copy()
            return chat.model_copy()

    async def get(self, chat_id: str, user_id: str) -> Optional[ChatRecord]:
        """
        Get a chat owned by a user.

        Returns:
            ChatRecord | None: None when absent or owned by someone else
        """
        async with self._lock:
            chat = self._chats.get(chat_id)
            if chat is None or chat.user_id != user_id:
                return None
            return chat.model_copy()

    async def list_for_user(self, user_id: str, page: int, size: int) -> list[ChatRecord]:
        """
        Page through a user's chats, newest first.

        Args:
            user_id: Owner of the chats
            page: Zero-based page index
            size: Page size
        """
        async with self._lock:
            chats = [chat for chat in reversed(self._chats.values()) if chat.user_id == user_id]

        # Stable sort: equal timestamps keep newest-inserted first
        chats.sort(key=lambda chat: chat.created_at, reverse=True)
        start = page * size
        return [chat.model_copy() for chat in chats[start : start + size]]

    async def delete(self, chat_id: str) -> bool:
        async with self._lock:
            return self._chats.pop(chat_id, None) is not None
