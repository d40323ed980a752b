"""Chat bot plumbing: incoming messages, the outgoing bot handle and pluggable modules."""

from __future__ import annotations

import abc
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Message:
    """An incoming chat message."""

    chat_id: int
    message_id: int = 0
    text: str | None = None
    user_id: int | None = None
    username: str | None = None


@dataclass(frozen=True)
class SentMessage:
    """A message the bot has sent to a chat."""

    chat_id: int
    text: str
    reply_to: int | None = None


Sender = Callable[[SentMessage], Awaitable[None]]


class Bot:
    """Outgoing side of the bot.

    Every message is handed to the optional *sender* coroutine (which delivers it
    to the chat service) and recorded in :attr:`sent`.
    """

    def __init__(self, sender: Sender | None = None) -> None:
        self._sender = sender
        self.sent: list[SentMessage] = []

    async def send_message(
        self, chat_id: int, text: str, reply_to: int | None = None
    ) -> SentMessage:
        """Send *text* to *chat_id*, optionally as a reply to a message id."""
        message = SentMessage(chat_id=chat_id, text=text, reply_to=reply_to)
        if self._sender is not None:
            await self._sender(message)
        self.sent.append(message)
        return message


class BotModule(abc.ABC):
    """A feature of the bot that owns some commands and may react to messages."""

    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable module name."""

    @abc.abstractmethod
    def commands(self) -> list[tuple[str, str]]:
        """Pairs of (command, description) this module handles."""

    @abc.abstractmethod
    async def handle_command(
        self,
        bot: Bot,
        msg: Message,
        command: str,
        args: Sequence[str],
        db: Any,
        config: Any,
    ) -> None:
        """Handle one of the module's commands."""

    async def handle_message(self, bot: Bot, msg: Message, db: Any, config: Any) -> bool:
        """React to a plain message; return True if the message was handled."""
        return False


class ModuleManager:
    """Routes commands and messages to registered modules."""

    def __init__(self) -> None:
        self.modules: dict[str, BotModule] = {}

    def register_module(self, module: BotModule) -> None:
        """Add a module, replacing any module registered under the same name."""
        self.modules[module.name()] = module

    async def handle_command(
        self,
        bot: Bot,
        msg: Message,
        command: str,
        args: Sequence[str],
        db: Any,
        config: Any,
    ) -> bool:
        """Dispatch *command* to the first module that owns it; return whether one did."""
        for module in self.modules.values():
            if any(cmd == command for cmd, _ in module.commands()):
                await module.handle_command(bot, msg, command, list(args), db, config)
                return True
        return False

    async def handle_message(self, bot: Bot, msg: Message, db: Any, config: Any) -> None:
        """Offer *msg* to modules in turn until one handles it."""
        for module in self.modules.values():
            if await module.handle_message(bot, msg, db, config):
                break

    def get_all_commands(self) -> list[str]:
        """Help lines: a header per module, one line per command, then a blank line."""
        lines: list[str] = []
        for module in self.modules.values():
            lines.append(f"{module.name()}:")
            lines.extend(f"/{cmd} - {desc}" for cmd, desc in module.commands())
            lines.append("")
        return lines