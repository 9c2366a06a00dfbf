"""
Telegram message and command handlers.

Handlers are thin: they pull what they need out of the ``Update`` and hand
off to the ``MessagePipeline`` stored in ``context.bot_data``.

Routing (see bot.py for registration order):
- /start, /help        -> membership-gated static texts
- any other /command   -> "Unknown command"
- plain text           -> MessagePipeline
- everything else      -> "only text" reply
"""

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from .formatting import render_reply
from .logging_config import bot_logger as logger
from .pipeline import APOLOGY_TEXT, MessagePipeline

PIPELINE_KEY = "pipeline"

KNOWN_COMMANDS = ("start", "help")

TEXT_ONLY_TEXT = "📄 I can only understand text messages."
UNKNOWN_COMMAND_TEXT = "❌ Unknown command: /{command}"

WELCOME_TEXT = """🤖 **Welcome to the Gemini AI Bot!**

Send me any message and I'll respond using **Google's Gemini AI**.

**Note:** Only text messages are supported."""

HELP_TEXT = """📖 **How to use this bot**

Just send a text message and Gemini will answer it.
Each message is answered on its own, there is no conversation memory.
Wait for the current answer before sending the next message.

**Commands:**
/start - bot info
/help - this help"""


def get_pipeline(context: ContextTypes.DEFAULT_TYPE) -> MessagePipeline:
    return context.bot_data[PIPELINE_KEY]


def parse_command(text: str) -> str:
    """
    Extract the command name from message text.

    "/Start@MyBot payload" -> "start"
    """
    token = text.split(maxsplit=1)[0] if text.strip() else ""
    return token.lstrip("/").split("@", 1)[0].lower()


async def handle_start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start: gate, register the chat, send the welcome text."""
    pipeline = get_pipeline(context)
    user = update.effective_user
    chat_id = update.effective_chat.id

    logger.info(f"/start from user_id={user.id}, chat_id={chat_id}")

    if not await pipeline.gate.is_member(user.id):
        await update.message.reply_text(pipeline.join_text)
        return

    pipeline.register_chat(chat_id)

    await update.message.reply_text(
        render_reply(WELCOME_TEXT),
        parse_mode=ParseMode.MARKDOWN_V2,
    )


async def handle_help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    pipeline = get_pipeline(context)

    if not await pipeline.gate.is_member(update.effective_user.id):
        await update.message.reply_text(pipeline.join_text)
        return

    await update.message.reply_text(
        render_reply(HELP_TEXT),
        parse_mode=ParseMode.MARKDOWN_V2,
    )


async def handle_unknown_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Reply to any /command outside KNOWN_COMMANDS. No gate, no registry."""
    command = parse_command(update.message.text or "")
    if command in KNOWN_COMMANDS:
        return

    await update.message.reply_text(UNKNOWN_COMMAND_TEXT.format(command=command))


async def handle_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Relay a plain text message through the pipeline."""
    message = update.message
    user = update.effective_user

    logger.info(
        f"Received message from user_id={user.id}, chat_id={message.chat_id}, "
        f"text_len={len(message.text)}"
    )

    if message.text.startswith("/"):
        # Slash text Telegram did not mark as a bot command
        await handle_unknown_command(update, context)
        return

    outcome = await get_pipeline(context).handle(message.chat_id, user.id, message.text)
    logger.debug(f"Pipeline outcome for chat_id={message.chat_id}: {outcome.value}")


async def handle_non_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Stickers, photos, voice etc. get a fixed reply."""
    await update.message.reply_text(TEXT_ONLY_TEXT)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in handlers."""
    logger.error(f"Bot error: {context.error}", exc_info=context.error)

    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(APOLOGY_TEXT)
        except Exception as e:
            logger.error(f"Failed to send error reply: {e}")
