"""Shared fixtures: a fake Telegram bot, fake Gemini client, real registry on tmp_path."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from relay_bot.services.user_registry import UserRegistry
from relay_bot.telegram_bot.guard import RequestGuard
from relay_bot.telegram_bot.membership import MembershipGate
from relay_bot.telegram_bot.pipeline import MessagePipeline

CHANNEL = "@relay_test_channel"
CHAT_ID = 1001
USER_ID = 42


@pytest.fixture(autouse=True)
def telegram_env(monkeypatch):
    """Minimal valid configuration for code that calls get_settings()."""
    from relay_bot.config import get_settings

    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456:TEST-TOKEN")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("REQUIRED_CHANNEL", CHANNEL)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def bot():
    """Async stand-in for telegram.Bot; everyone is a channel member by default."""
    fake = MagicMock()
    fake.send_message = AsyncMock()
    fake.send_chat_action = AsyncMock()
    fake.get_chat_member = AsyncMock(return_value=MagicMock(status="member"))
    return fake


@pytest.fixture
def generator():
    fake = MagicMock()
    fake.generate = AsyncMock(return_value="**Hi** there")
    return fake


@pytest.fixture
def registry(tmp_path):
    return UserRegistry(tmp_path / "users.json")


@pytest.fixture
def guard():
    return RequestGuard()


@pytest.fixture
def pipeline(bot, guard, registry, generator):
    return MessagePipeline(
        bot=bot,
        gate=MembershipGate(bot, CHANNEL),
        guard=guard,
        registry=registry,
        generator=generator,
        required_channel=CHANNEL,
    )
