"""
Message pipeline: membership gate -> busy check -> Gemini -> MarkdownV2 reply.

One ``MessagePipeline`` is built per application and stored in
``bot_data``. Each incoming text message runs ``handle`` as its own task:

    RECEIVED
      -> gate check        (not a member -> join prompt, stop)
      -> guard acquire     (already busy -> wait prompt, stop)
      -> register chat     (best effort)
      -> typing indicator  (best effort)
      -> Gemini            (failure -> apology)
      -> send reply        (failure -> apology)
      -> guard release     (always, exactly once)

Nothing raised inside the pipeline reaches the caller; every failure ends in
a reply or a log line.
"""

from enum import Enum

from telegram import Bot, LinkPreviewOptions
from telegram.constants import ChatAction, ParseMode

from relay_bot.services.generation import GenerationClient
from relay_bot.services.user_registry import UserRegistry
from .formatting import render_reply
from .guard import RequestGuard
from .logging_config import bot_logger as logger
from .membership import MembershipGate

COMMAND_PREFIX = "/"

JOIN_CHANNEL_TEXT = "🔒 Please join our channel to use this bot: {channel}"
BUSY_TEXT = "⏳ Please wait for the current response."
APOLOGY_TEXT = "⚠️ Something went wrong. Please try again later."


class PipelineOutcome(str, Enum):
    """Terminal state of one pass through the pipeline."""

    IGNORED_COMMAND = "ignored_command"
    REJECTED_NOT_MEMBER = "rejected_not_member"
    REJECTED_BUSY = "rejected_busy"
    SEND_OK = "send_ok"
    SEND_FAILED = "send_failed"


class MessagePipeline:
    """Relays one user message to Gemini and the answer back to the chat."""

    def __init__(
        self,
        bot: Bot,
        gate: MembershipGate,
        guard: RequestGuard,
        registry: UserRegistry,
        generator: GenerationClient,
        required_channel: str | int,
    ):
        self.bot = bot
        self.gate = gate
        self.guard = guard
        self.registry = registry
        self.generator = generator
        self.required_channel = required_channel

    @property
    def join_text(self) -> str:
        return JOIN_CHANNEL_TEXT.format(channel=self.required_channel)

    async def handle(self, chat_id: int, sender_id: int, text: str) -> PipelineOutcome:
        if text.startswith(COMMAND_PREFIX):
            return PipelineOutcome.IGNORED_COMMAND

        if not await self.gate.is_member(sender_id):
            logger.info(f"Rejected non-member user_id={sender_id} chat_id={chat_id}")
            await self._send_plain(chat_id, self.join_text)
            return PipelineOutcome.REJECTED_NOT_MEMBER

        if not self.guard.try_acquire(chat_id):
            logger.info(f"Chat {chat_id} is busy, rejecting new message")
            await self._send_plain(chat_id, BUSY_TEXT)
            return PipelineOutcome.REJECTED_BUSY

        try:
            return await self._relay(chat_id, text)
        finally:
            self.guard.release(chat_id)

    async def _relay(self, chat_id: int, text: str) -> PipelineOutcome:
        """Runs while the guard slot for ``chat_id`` is held."""
        self.register_chat(chat_id)

        try:
            await self.bot.send_chat_action(chat_id, ChatAction.TYPING)
        except Exception as e:
            logger.warning(f"Typing indicator failed for chat_id={chat_id}: {e}")

        try:
            raw_response = await self.generator.generate(text)
            await self.bot.send_message(
                chat_id,
                render_reply(raw_response),
                parse_mode=ParseMode.MARKDOWN_V2,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
        except Exception as e:
            logger.error(f"Error responding to chat_id={chat_id}: {e}", exc_info=True)
            await self._send_plain(chat_id, APOLOGY_TEXT)
            return PipelineOutcome.SEND_FAILED

        logger.info(f"Replied to chat_id={chat_id}, response_len={len(raw_response)}")
        return PipelineOutcome.SEND_OK

    def register_chat(self, chat_id: int) -> None:
        """Record the chat. A broken registry must not block the reply."""
        try:
            self.registry.register_if_absent(chat_id)
        except Exception as e:
            logger.warning(f"Failed to register chat_id={chat_id}: {e}")

    async def _send_plain(self, chat_id: int, text: str) -> bool:
        """Send a fixed reply without markup. Failures are logged, not raised."""
        try:
            await self.bot.send_message(chat_id, text)
        except Exception as e:
            logger.error(f"Failed to send message to chat_id={chat_id}: {e}")
            return False
        return True
