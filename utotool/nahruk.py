"""Module that blocks messages containing trigger words."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .bot_module import Bot, BotModule, Message

TRIGGER_WORDS = ("украина", "хохол", "хохл")
BLOCKED_TEXT = "Ваш нахрюк заблокирован ❌"


def check_nahruk(text: str) -> str:
    """Return the blocking reply if *text* contains a trigger word, else an empty string."""
    if any(word in text for word in TRIGGER_WORDS):
        return BLOCKED_TEXT
    return ""


class PowerfulNahrukModule(BotModule):
    """Replies to messages that contain trigger words."""

    def name(self) -> str:
        return "Powerfull Nahruk"

    def commands(self) -> list[tuple[str, str]]:
        return []

    async def handle_command(
        self,
        bot: Bot,
        msg: Message,
        command: str,
        args: Sequence[str],
        db: Any,
        config: Any,
    ) -> None:
        return None

    async def handle_message(self, bot: Bot, msg: Message, db: Any, config: Any) -> bool:
        reply = check_nahruk(msg.text or "")
        if not reply:
            return False
        await bot.send_message(msg.chat_id, reply, reply_to=msg.message_id)
        return True