"""
Tests for Application wiring and update routing.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from telegram import Update
from telegram.ext import CommandHandler, MessageHandler

from relay_bot.config import get_settings
from relay_bot.telegram_bot import bot as bot_module
from relay_bot.telegram_bot.bot import build_application
from relay_bot.telegram_bot.handlers import (
    PIPELINE_KEY,
    handle_non_text_message,
    handle_text_message,
    handle_unknown_command,
)
from relay_bot.telegram_bot.pipeline import MessagePipeline


def message_update(application, **message_fields):
    data = {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "date": int(datetime(2025, 1, 1, tzinfo=timezone.utc).timestamp()),
            "chat": {"id": 1001, "type": "private"},
            "from": {"id": 42, "is_bot": False, "first_name": "Test"},
            **message_fields,
        },
    }
    return Update.de_json(data, application.bot)


@pytest.fixture
def application(registry, generator):
    return build_application(get_settings(), generator=generator, registry=registry)


def first_message_handler(application, update):
    """First non-command handler that accepts the update."""
    for handler in application.handlers[0]:
        if isinstance(handler, MessageHandler) and handler.check_update(update):
            return handler.callback
    return None


class TestBuildApplication:

    def test_pipeline_stored_in_bot_data(self, application, registry, generator):
        pipeline = application.bot_data[PIPELINE_KEY]
        assert isinstance(pipeline, MessagePipeline)
        assert pipeline.registry is registry
        assert pipeline.generator is generator
        assert pipeline.required_channel == "@relay_test_channel"

    def test_updates_processed_concurrently(self, application):
        assert application.concurrent_updates > 1

    def test_command_handlers_registered_first(self, application):
        handlers = application.handlers[0]
        assert isinstance(handlers[0], CommandHandler)
        assert handlers[0].commands == frozenset({"start"})
        assert isinstance(handlers[1], CommandHandler)
        assert handlers[1].commands == frozenset({"help"})

    def test_error_handler_registered(self, application):
        assert len(application.error_handlers) == 1

    def test_each_application_has_own_guard(self, registry, generator):
        settings = get_settings()
        first = build_application(settings, generator=generator, registry=registry)
        second = build_application(settings, generator=generator, registry=registry)
        assert first.bot_data[PIPELINE_KEY].guard is not second.bot_data[PIPELINE_KEY].guard


class TestRouting:

    def test_plain_text_goes_to_pipeline(self, application):
        update = message_update(application, text="hello")
        assert first_message_handler(application, update) is handle_text_message

    def test_unknown_command_routed(self, application):
        update = message_update(
            application,
            text="/bogus",
            entities=[{"type": "bot_command", "offset": 0, "length": 6}],
        )
        assert first_message_handler(application, update) is handle_unknown_command

    def test_sticker_routed_to_text_only_reply(self, application):
        update = message_update(
            application,
            sticker={
                "file_id": "abc",
                "file_unique_id": "abc-u",
                "width": 512,
                "height": 512,
                "is_animated": False,
                "is_video": False,
                "type": "regular",
            },
        )
        assert first_message_handler(application, update) is handle_non_text_message

    def test_edited_message_ignored(self, application):
        data = {
            "update_id": 2,
            "edited_message": {
                "message_id": 10,
                "date": 1735689600,
                "edit_date": 1735689700,
                "chat": {"id": 1001, "type": "private"},
                "from": {"id": 42, "is_bot": False, "first_name": "Test"},
                "text": "edited",
            },
        }
        update = Update.de_json(data, application.bot)
        assert first_message_handler(application, update) is None


class TestGetBotApplication:

    def test_singleton(self, monkeypatch):
        monkeypatch.setattr(bot_module, "_application", None)
        monkeypatch.setattr(bot_module, "get_generation_client", MagicMock())

        first = bot_module.get_bot_application()
        assert bot_module.get_bot_application() is first
