"""
Run the bot with long polling until interrupted.

    python -m relay_bot
"""

import sys

from pydantic import ValidationError
from telegram import Update

from relay_bot.config import get_settings
from relay_bot.telegram_bot.bot import get_bot_application
from relay_bot.telegram_bot.logging_config import bot_logger as logger, setup_logging


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(
            "Missing or invalid configuration. TELEGRAM_BOT_TOKEN, GEMINI_API_KEY "
            f"and REQUIRED_CHANNEL are required.\n{e}"
        )
        return 1

    setup_logging(settings.log_level)

    application = get_bot_application()
    logger.info("🤖 Telegram bot is running. Send /start to begin chatting.")
    application.run_polling(allowed_updates=Update.ALL_TYPES)
    return 0


if __name__ == "__main__":
    sys.exit(main())
