"""Telegram bot that relays text messages to Google Gemini."""

__version__ = "0.1.0"
