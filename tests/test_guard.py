"""
Tests for the per-chat single-flight guard.
"""

from relay_bot.telegram_bot.guard import RequestGuard


class TestRequestGuard:

    def test_first_acquire_succeeds(self):
        guard = RequestGuard()
        assert guard.try_acquire(1) is True

    def test_second_acquire_same_chat_fails(self):
        guard = RequestGuard()
        guard.try_acquire(1)
        assert guard.try_acquire(1) is False

    def test_different_chats_independent(self):
        guard = RequestGuard()
        assert guard.try_acquire(1) is True
        assert guard.try_acquire(2) is True

    def test_release_frees_slot(self):
        guard = RequestGuard()
        guard.try_acquire(1)
        guard.release(1)
        assert guard.try_acquire(1) is True

    def test_failed_acquire_keeps_existing_hold(self):
        """A rejected acquire must not disturb the request already in flight."""
        guard = RequestGuard()
        guard.try_acquire(1)
        guard.try_acquire(1)
        guard.release(1)
        assert guard.try_acquire(1) is True

    def test_release_without_acquire_is_noop(self):
        guard = RequestGuard()
        guard.release(99)
        assert guard.try_acquire(99) is True

    def test_release_only_affects_given_chat(self):
        guard = RequestGuard()
        guard.try_acquire(1)
        guard.try_acquire(2)
        guard.release(1)
        assert guard.try_acquire(2) is False
