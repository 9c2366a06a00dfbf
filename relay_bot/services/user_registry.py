"""
Registry of every chat that has talked to the bot.

Stored as a flat JSON array of chat ids. The file is re-read before every
check so manual edits are picked up, and rewritten only when a new id is
added. One process writes it; there is no file locking.
"""

import json
from pathlib import Path

from relay_bot.telegram_bot.logging_config import bot_logger as logger


class RegistryError(Exception):
    """Registry file exists but cannot be read or parsed."""


class UserRegistry:
    """Deduplicated, persisted list of chat ids."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[int]:
        """Return all stored chat ids (empty if the file does not exist yet)."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise RegistryError(f"Cannot read registry {self.path}: {e}") from e

        if not isinstance(data, list):
            raise RegistryError(f"Registry {self.path} is not a JSON array")

        return data

    def register_if_absent(self, chat_id: int) -> bool:
        """
        Add ``chat_id`` unless it is already stored.

        Returns True when the id was new and the file was rewritten.
        """
        users = self.load()
        if chat_id in users:
            return False

        users.append(chat_id)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(users, indent=2), encoding="utf-8")

        logger.info(f"Registered new chat_id={chat_id} (total={len(users)})")
        return True
