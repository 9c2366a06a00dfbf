"""
Telegram side of the relay bot.

- bot.py          - Application wiring (polling and webhook)
- handlers.py     - command / text / non-text handlers
- pipeline.py     - gate -> guard -> Gemini -> reply
- membership.py   - required-channel check
- guard.py        - one in-flight request per chat
- formatting.py   - Gemini markdown -> Telegram MarkdownV2
"""
