"""
Single-flight guard: at most one Gemini request in flight per chat.

All handlers run on one asyncio event loop and ``try_acquire`` never awaits,
so the membership test and the insert cannot be interleaved by another task.
"""


class RequestGuard:
    """In-memory set of chat ids with a pending upstream request."""

    def __init__(self):
        self._pending: set[int] = set()

    def try_acquire(self, chat_id: int) -> bool:
        """Claim the slot for ``chat_id``. False if it is already taken."""
        if chat_id in self._pending:
            return False
        self._pending.add(chat_id)
        return True

    def release(self, chat_id: int) -> None:
        """Free the slot. Safe to call when nothing is held."""
        self._pending.discard(chat_id)
