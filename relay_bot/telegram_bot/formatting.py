"""
Text transforms between Gemini output and Telegram MarkdownV2.

Gemini answers in CommonMark-ish markdown (``**bold**``, ``* item``).
Telegram's MarkdownV2 uses single-asterisk bold and rejects any unescaped
reserved character, so replies go through two steps:

1. ``format_for_display`` - rewrite bold, squeeze blank lines, bullets
2. ``escape_markdown_v2`` - backslash-escape reserved characters

``render_reply`` runs both for the bot. The bold markers written in step 1
are structure and stay raw; every other reserved character, including stray
asterisks that came from Gemini, is escaped.
"""

import re

# Characters Telegram treats as MarkdownV2 syntax, plus the backslash itself
MARKDOWN_V2_RESERVED = "_*[]()~`>#+-=|{}.!\\"

BOLD_MARKER = "*"
BULLET = "• "

# Private-use placeholders for bold markers written by render_reply
_BOLD_OPEN = "\ue000"
_BOLD_CLOSE = "\ue001"

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_BLANK_LINES_RE = re.compile(r"\n{2,}")
_BULLET_RE = re.compile(r"^\* ", re.MULTILINE)
_MARKED_BULLET_RE = re.compile("^[*" + _BOLD_OPEN + "] ", re.MULTILINE)
_MARKED_BOLD_RE = re.compile(_BOLD_OPEN + "([^" + _BOLD_OPEN + _BOLD_CLOSE + "]*)" + _BOLD_CLOSE)
_RESERVED_RE = re.compile("([" + re.escape(MARKDOWN_V2_RESERVED) + "])")


def format_for_display(text: str) -> str:
    """Convert Gemini markdown into Telegram-flavoured markup."""
    text = _BOLD_RE.sub(r"*\1*", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return _BULLET_RE.sub(BULLET, text)


def escape_markdown_v2(text: str) -> str:
    """Prefix every MarkdownV2 reserved character with a backslash."""
    return _RESERVED_RE.sub(r"\\\1", text)


def render_reply(text: str) -> str:
    """
    Format and escape Gemini output for ``parse_mode=MarkdownV2``.

    Runs the ``format_for_display`` rewrites in the same order, with
    placeholders standing in for the bold markers they write. After escaping,
    placeholders that still form a non-empty pair become raw ``*``. Anything
    else (a marker eaten by the bullet rule, an empty ``****`` span) is
    escaped like any other asterisk, since Telegram rejects unpaired markers
    and empty entities.
    """
    text = text.replace(_BOLD_OPEN, "").replace(_BOLD_CLOSE, "")
    text = _BOLD_RE.sub(_BOLD_OPEN + r"\1" + _BOLD_CLOSE, text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    text = _MARKED_BULLET_RE.sub(BULLET, text)

    text = _MARKED_BOLD_RE.sub(_restore_bold, escape_markdown_v2(text))
    return text.replace(_BOLD_OPEN, "\\*").replace(_BOLD_CLOSE, "\\*")


def _restore_bold(match: re.Match) -> str:
    inner = match.group(1)
    if not inner:
        return "\\*\\*"
    return BOLD_MARKER + inner + BOLD_MARKER
