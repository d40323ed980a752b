"""The pig-raising game: create a pig, feed it, and compare it with others."""

from __future__ import annotations

import logging
import math
import random
import sqlite3
import time
from collections.abc import Sequence

from .bot_module import Bot, BotModule, Message
from .config import Config, GameConfig
from .database import Database, Pig, PigNotFoundError

log = logging.getLogger(__name__)

PIG_NAMES = (
    "Хрякоблядь",
    "Свинопидор",
    "Ебаный Кабан",
    "Бекон ебучий",
    "Хрюкало Сраное",
    "Матьегохряк",
    "Пиздохрюк",
    "Свинья в говне",
    "Блядобекон",
    "Хрякотрах",
)

DB_ERROR_TEXT = "Ошибка базы данных"
CREATE_ERROR_TEXT = "Ошибка при создании свиньи"
FEED_ERROR_TEXT = "Ошибка при кормлении свиньи"
UNKNOWN_COMMAND_TEXT = "Неизвестная команда свиньи"

_DB_ERRORS = (sqlite3.Error, PigNotFoundError)


def calculate_grow_range(
    score: float, rank: int, total_players: int, config: GameConfig
) -> tuple[int, int]:
    """Return the (minimum, maximum) weight change for a feeding."""
    if total_players <= 0:
        raise ValueError("total_players must be positive")
    loss_base = config.base_growth
    gain_base = config.weight_factor
    loss_coefficient = config.rank_factor
    gain_coefficient = 1.0

    rank_percentage = rank / total_players
    loss_modifier = 1.0 - rank_percentage
    gain_modifier = 1.0 / (1.0 - rank_percentage + 1.0)

    max_loss = ((loss_base * score) * (loss_coefficient * loss_modifier)) + 15.0
    max_gain = (gain_base * score) * (2.0 * gain_coefficient * gain_modifier) + 35.0

    return -math.floor(max_loss), math.floor(max_gain)


def generate_default_pig_name(rng: random.Random | None = None) -> str:
    """Pick a random default pig name."""
    return (rng or random).choice(PIG_NAMES)


def _growth_text(growth: int) -> str:
    if growth > 0:
        return f"поправился на {growth} кг"
    if growth < 0:
        return f"уменьшился на {-growth} кг"
    return "обосрался и нихуя не прибавил"


class PigGameModule(BotModule):
    """Commands for creating, feeding and inspecting pigs."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def name(self) -> str:
        return "Pig Game"

    def commands(self) -> list[tuple[str, str]]:
        return [
            ("pig", "Создать новую свинью"),
            ("grow", "Покормить свинью"),
            ("my", "Посмотреть информацию о своей свинье"),
            ("pigstats", "Посмотреть статистику свиней"),
        ]

    async def create_new_pig(
        self, chat_id: int, user_id: int, owner_name: str, pig_name: str, db: Database
    ) -> Pig:
        """Store a fresh pig for the user and return it."""
        pig = Pig(chat_id=chat_id, user_id=user_id, name=pig_name, owner_name=owner_name)
        return await db.create_pig(pig)

    async def feed_pig(self, pig: Pig, db: Database, config: Config) -> str:
        """Feed *pig* in place, store it, and return the report text."""
        pig.last_feed = time.time()

        total_players = await db.get_chat_total_players(pig.chat_id)
        rank = await db.get_pig_rank(pig.chat_id, pig.user_id)
        current_rank = rank if rank is not None else 1
        min_grow, max_grow = calculate_grow_range(
            float(pig.weight), current_rank, total_players, config.game
        )
        growth = self._rng.randint(min_grow, max_grow)

        pig.weight = max(pig.weight + growth, 1)
        await db.update_pig(pig)

        return (
            f"🐖 Ваш {pig.name} {_growth_text(growth)} \n"
            f"💪 Теперь он весит {pig.weight} кг.\n\n" + " " * 20
        )

    async def handle_command(
        self,
        bot: Bot,
        msg: Message,
        command: str,
        args: Sequence[str],
        db: Database,
        config: Config,
    ) -> None:
        chat_id = msg.chat_id
        user_id = msg.user_id if msg.user_id is not None else 0
        username = msg.username if msg.username is not None else "Unknown"

        if command == "pig":
            await self._cmd_pig(bot, chat_id, user_id, username, args, db)
        elif command == "grow":
            await self._cmd_grow(bot, chat_id, user_id, username, args, db, config)
        elif command == "my":
            await self._cmd_my(bot, chat_id, user_id, db)
        elif command == "pigstats":
            await self._cmd_pigstats(bot, chat_id, user_id, args, db)
        else:
            await bot.send_message(chat_id, UNKNOWN_COMMAND_TEXT)

    def _pig_name(self, args: Sequence[str]) -> str:
        return " ".join(args) if args else generate_default_pig_name(self._rng)

    async def _cmd_pig(self, bot, chat_id, user_id, username, args, db) -> None:
        pig_name = self._pig_name(args)
        try:
            existing = await db.get_pig(chat_id, user_id)
        except _DB_ERRORS as exc:
            log.error("Database error: %s", exc)
            await bot.send_message(chat_id, DB_ERROR_TEXT)
            return
        if existing is not None:
            await bot.send_message(
                chat_id,
                f"У вас уже есть свинья: {existing.name} (вес: {existing.weight})",
            )
            return
        try:
            pig = await self.create_new_pig(chat_id, user_id, username, pig_name, db)
        except _DB_ERRORS as exc:
            log.error("Failed to create pig: %s", exc)
            await bot.send_message(chat_id, CREATE_ERROR_TEXT)
            return
        await bot.send_message(
            chat_id,
            f"🐷 Поздравляем! {username} создал свинью: {pig.name} (вес: {pig.weight})",
        )

    async def _feed_and_report(self, bot, chat_id, pig, db, config) -> None:
        try:
            report = await self.feed_pig(pig, db, config)
        except _DB_ERRORS as exc:
            log.error("Failed to feed pig: %s", exc)
            await bot.send_message(chat_id, FEED_ERROR_TEXT)
            return
        await bot.send_message(chat_id, report)

    async def _cmd_grow(self, bot, chat_id, user_id, username, args, db, config) -> None:
        try:
            pig = await db.get_pig(chat_id, user_id)
        except _DB_ERRORS as exc:
            log.error("Database error: %s", exc)
            await bot.send_message(chat_id, DB_ERROR_TEXT)
            return
        if pig is None:
            try:
                pig = await self.create_new_pig(
                    chat_id, user_id, username, self._pig_name(args), db
                )
            except _DB_ERRORS as exc:
                log.error("Failed to create pig: %s", exc)
                await bot.send_message(chat_id, CREATE_ERROR_TEXT)
                return
        await self._feed_and_report(bot, chat_id, pig, db, config)

    async def _cmd_my(self, bot, chat_id, user_id, db) -> None:
        try:
            pig = await db.get_pig(chat_id, user_id)
        except _DB_ERRORS as exc:
            log.error("Database error: %s", exc)
            await bot.send_message(chat_id, DB_ERROR_TEXT)
            return
        if pig is None:
            await bot.send_message(chat_id, "У вас нет свиньи! Создайте её командой /pig <имя>")
            return
        status = "🤢 Отравлена" if pig.poisoned else "😊 Здорова"
        await bot.send_message(
            chat_id,
            f"🐷 Ваша свинья: {pig.name}\n"
            f"💪 Вес: {pig.weight}\n"
            f"🏠 Сарай: {pig.barn}\n"
            f"🐖 Свинарник: {pig.pigsty}\n"
            f"🏥 Ветклиника: {pig.vetclinic}\n"
            f"🧪 Таблетки: {pig.pills}\n"
            f"📊 Статус: {status}",
        )

    async def _cmd_pigstats(self, bot, chat_id, user_id, args, db) -> None:
        if args:
            search_name = " ".join(args)
            try:
                pigs = await db.find_pig_by_name(chat_id, search_name)
            except _DB_ERRORS as exc:
                log.error("Database error: %s", exc)
                await bot.send_message(chat_id, DB_ERROR_TEXT)
                return
            if not pigs:
                await bot.send_message(chat_id, f"Свинья с именем '{search_name}' не найдена")
                return
            pig = pigs[0]
            await bot.send_message(
                chat_id,
                f"🐷 {pig.name}\n"
                f"👤 Владелец: {pig.owner_name}\n"
                f"💪 Вес: {pig.weight}\n"
                f"🏠 Сарай: {pig.barn}",
            )
            return

        try:
            pig = await db.get_pig(chat_id, user_id)
        except _DB_ERRORS as exc:
            log.error("Database error: %s", exc)
            await bot.send_message(chat_id, DB_ERROR_TEXT)
            return
        if pig is None:
            await bot.send_message(chat_id, "У вас нет свиньи!")
            return
        await bot.send_message(
            chat_id,
            f"🐷 Ваша свинья: {pig.name}\n💪 Вес: {pig.weight}\n🏠 Сарай: {pig.barn}",
        )