"""
Main Telegram bot application.

Uses python-telegram-bot. The same Application serves both long polling
(``python -m relay_bot``) and webhook mode (relay_bot.main).
"""

from telegram import Update
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from relay_bot.config import Settings, get_settings
from relay_bot.services.generation import get_generation_client
from relay_bot.services.user_registry import UserRegistry
from .guard import RequestGuard
from .handlers import (
    KNOWN_COMMANDS,
    PIPELINE_KEY,
    handle_error,
    handle_help_command,
    handle_non_text_message,
    handle_start_command,
    handle_text_message,
    handle_unknown_command,
)
from .logging_config import bot_logger as logger
from .membership import MembershipGate
from .pipeline import MessagePipeline


# Global application instance (initialized once)
_application: Application | None = None


def build_application(settings: Settings, generator=None, registry=None) -> Application:
    """
    Create the Application, its MessagePipeline and all handlers.

    ``generator`` and ``registry`` default to the configured Gemini client
    and the JSON file registry.
    """
    # Updates run as independent tasks so one slow Gemini call does not
    # block other users
    application = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .concurrent_updates(True)
        .build()
    )

    application.bot_data[PIPELINE_KEY] = MessagePipeline(
        bot=application.bot,
        gate=MembershipGate(application.bot, settings.required_channel),
        guard=RequestGuard(),
        registry=registry or UserRegistry(settings.users_file),
        generator=generator or get_generation_client(),
        required_channel=settings.required_channel,
    )

    new_messages = filters.UpdateType.MESSAGE

    # Order matters: first matching handler wins
    application.add_handler(CommandHandler("start", handle_start_command, filters=new_messages))
    application.add_handler(CommandHandler("help", handle_help_command, filters=new_messages))
    application.add_handler(MessageHandler(new_messages & filters.COMMAND, handle_unknown_command))
    application.add_handler(MessageHandler(new_messages & filters.TEXT, handle_text_message))
    application.add_handler(MessageHandler(new_messages & ~filters.TEXT, handle_non_text_message))

    application.add_error_handler(handle_error)

    logger.info(
        f"Telegram bot application initialized "
        f"(channel={settings.required_channel}, commands={', '.join(KNOWN_COMMANDS)})"
    )

    return application


def get_bot_application() -> Application:
    """Get or create telegram bot application."""
    global _application

    if _application is None:
        _application = build_application(get_settings())

    return _application


async def handle_telegram_update(update_data: dict) -> None:
    """
    Process one webhook update from Telegram.

    Called by the FastAPI webhook endpoint as a background task.
    """
    try:
        app = get_bot_application()

        update = Update.de_json(update_data, app.bot)

        if update:
            await app.process_update(update)
        else:
            logger.warning("Received invalid update data")

    except Exception as e:
        logger.error(f"Failed to process update: {e}", exc_info=True)


async def initialize_bot() -> None:
    """
    Initialize bot application (call on startup).
    """
    app = get_bot_application()
    await app.initialize()
    logger.info("Bot initialized successfully")


async def shutdown_bot() -> None:
    """
    Shutdown bot application (call on shutdown).
    """
    global _application
    if _application:
        await _application.shutdown()
        _application = None
        logger.info("Bot shut down")
