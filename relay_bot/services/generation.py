"""
Gemini text generation.

Talks to Gemini through its OpenAI-compatible endpoint, so the regular
OpenAI SDK is the client. One prompt in, one text reply out; no history.
"""

import asyncio
from typing import Optional

from openai import OpenAI, OpenAIError

from relay_bot.config import get_settings
from relay_bot.telegram_bot.logging_config import bot_logger as logger


class GenerationError(Exception):
    """Gemini call failed or returned no text."""


class GenerationClient:
    """Thin wrapper around a chat completion call."""

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def generate_sync(self, prompt: str) -> str:
        """Blocking call. Raises GenerationError on any failure."""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.error(f"Gemini API error: {e}", exc_info=True)
            raise GenerationError(str(e)) from e

        if not response.choices:
            raise GenerationError("Gemini returned no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise GenerationError("Gemini returned an empty reply")

        return content

    async def generate(self, prompt: str) -> str:
        """Run the blocking SDK call in a worker thread."""
        return await asyncio.to_thread(self.generate_sync, prompt)


# Global instance
_generation_client: Optional[GenerationClient] = None


def get_generation_client() -> GenerationClient:
    """Get or create the Gemini client singleton."""
    global _generation_client
    if _generation_client is None:
        settings = get_settings()
        client = OpenAI(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
        )
        _generation_client = GenerationClient(client, settings.gemini_model)
    return _generation_client
