"""
Channel membership gate.

Every feature of the bot is locked behind membership in one required
channel. The bot must be an administrator of that channel, otherwise
Telegram refuses ``getChatMember`` and everyone is treated as a non-member.
"""

from telegram import Bot
from telegram.constants import ChatMemberStatus

from .logging_config import bot_logger as logger

# OWNER is "creator" on the wire
MEMBER_STATUSES = (
    ChatMemberStatus.OWNER,
    ChatMemberStatus.ADMINISTRATOR,
    ChatMemberStatus.MEMBER,
)


class MembershipGate:
    """Checks whether a Telegram user belongs to the required channel."""

    def __init__(self, bot: Bot, required_channel: str | int):
        self.bot = bot
        self.required_channel = required_channel

    async def is_member(self, user_id: int) -> bool:
        """
        Return True if the user is creator, admin or member of the channel.

        Any lookup failure (unknown user, bot not in channel, network error)
        counts as "not a member".
        """
        try:
            member = await self.bot.get_chat_member(self.required_channel, user_id)
        except Exception as e:
            logger.warning(f"Channel check failed for user_id={user_id}: {e}")
            return False

        return member.status in MEMBER_STATUSES
