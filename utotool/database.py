"""Persistent storage of pigs and loot in SQLite."""

from __future__ import annotations

import json
import re
import uuid as uuid_module
from dataclasses import astuple, dataclass, field, fields
from typing import Any

import aiosqlite

_SCHEMA = """
CREATE TABLE IF NOT EXISTS pigs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chat_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    weight INTEGER NOT NULL DEFAULT 0,
    name TEXT NOT NULL,
    last_feed REAL NOT NULL DEFAULT 0,
    last_salo REAL NOT NULL DEFAULT 0,
    owner_name TEXT NOT NULL,
    salo INTEGER NOT NULL DEFAULT 0,
    poisoned INTEGER NOT NULL DEFAULT 0,
    barn INTEGER NOT NULL DEFAULT 0,
    pigsty INTEGER NOT NULL DEFAULT 0,
    vetclinic INTEGER NOT NULL DEFAULT 0,
    vet_last_pickup REAL NOT NULL DEFAULT 0,
    last_weight INTEGER NOT NULL DEFAULT 0,
    avatar_url TEXT,
    biolab INTEGER NOT NULL DEFAULT 0,
    butchery INTEGER NOT NULL DEFAULT 0,
    pills INTEGER NOT NULL DEFAULT 0,
    factory INTEGER NOT NULL DEFAULT 0,
    warehouse INTEGER NOT NULL DEFAULT 0,
    institute INTEGER NOT NULL DEFAULT 0,
    UNIQUE (chat_id, user_id)
);
CREATE TABLE IF NOT EXISTS loot (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chat_id INTEGER NOT NULL,
    owner INTEGER NOT NULL,
    name TEXT NOT NULL,
    icon TEXT NOT NULL,
    description TEXT,
    class_name TEXT NOT NULL,
    class_icon TEXT NOT NULL,
    weight REAL NOT NULL,
    base_stats TEXT NOT NULL,
    rarity TEXT NOT NULL,
    uuid TEXT NOT NULL UNIQUE
);
CREATE INDEX IF NOT EXISTS pigs_chat_weight ON pigs (chat_id, weight DESC);
CREATE INDEX IF NOT EXISTS loot_chat_owner ON loot (chat_id, owner);
"""


class PigNotFoundError(LookupError):
    """Raised when updating a pig that does not exist."""


@dataclass(kw_only=True)
class Pig:
    """One player's pig in one chat."""

    id: int = 0
    chat_id: int
    user_id: int
    weight: int = 0
    name: str
    last_feed: float = 0.0
    last_salo: float = 0.0
    owner_name: str
    salo: int = 0
    poisoned: bool = False
    barn: int = 0
    pigsty: int = 0
    vetclinic: int = 0
    vet_last_pickup: float = 0.0
    last_weight: int = 0
    avatar_url: str | None = None
    biolab: int = 0
    butchery: int = 0
    pills: int = 0
    factory: int = 0
    warehouse: int = 0
    institute: int = 0


@dataclass(kw_only=True)
class Loot:
    """An item owned by a player in a chat."""

    id: int = 0
    chat_id: int
    owner: int
    name: str
    icon: str
    description: str | None = None
    class_name: str
    class_icon: str
    weight: float
    base_stats: Any = field(default_factory=dict)
    rarity: Any = field(default_factory=dict)
    uuid: uuid_module.UUID = field(default_factory=uuid_module.uuid4)


_PIG_COLUMNS = tuple(f.name for f in fields(Pig))
_PIG_DATA_COLUMNS = _PIG_COLUMNS[1:]
_PIG_SELECT = f"SELECT {', '.join(_PIG_COLUMNS)} FROM pigs"

_LOOT_COLUMNS = tuple(f.name for f in fields(Loot))
_LOOT_DATA_COLUMNS = _LOOT_COLUMNS[1:]
_LOOT_SELECT = f"SELECT {', '.join(_LOOT_COLUMNS)} FROM loot"


def _like_to_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if char == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _ilike(value: str | None, pattern: str | None) -> int | None:
    if value is None or pattern is None:
        return None
    return int(_like_to_regex(pattern).fullmatch(value) is not None)


def _pig_from_row(row: aiosqlite.Row) -> Pig:
    values = {name: row[name] for name in _PIG_COLUMNS}
    values["poisoned"] = bool(values["poisoned"])
    return Pig(**values)


def _pig_params(pig: Pig) -> tuple[Any, ...]:
    values = astuple(pig)[1:]
    return tuple(int(v) if isinstance(v, bool) else v for v in values)


def _loot_from_row(row: aiosqlite.Row) -> Loot:
    values = {name: row[name] for name in _LOOT_COLUMNS}
    values["base_stats"] = json.loads(values["base_stats"])
    values["rarity"] = json.loads(values["rarity"])
    values["uuid"] = uuid_module.UUID(values["uuid"])
    return Loot(**values)


def _sqlite_path(database_url: str) -> str:
    if database_url.startswith("sqlite://"):
        path = database_url[len("sqlite://"):]
        return path[1:] if path.startswith("/") else path
    if database_url.startswith("sqlite:"):
        return database_url[len("sqlite:"):]
    return database_url


class Database:
    """Asynchronous access to the pig and loot tables."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    @classmethod
    async def connect(cls, database_url: str) -> Database:
        """Open a database given a path or a sqlite:// URL."""
        connection = await aiosqlite.connect(_sqlite_path(database_url))
        connection.row_factory = aiosqlite.Row
        await connection.create_function("ilike", 2, _ilike, deterministic=True)
        return cls(connection)

    async def close(self) -> None:
        await self._conn.close()

    async def __aenter__(self) -> Database:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def migrate(self) -> None:
        """Create the tables if they do not exist yet."""
        await self._conn.executescript(_SCHEMA)
        await self._conn.commit()

    async def get_chat_pigs_ranked(self, chat_id: int) -> list[Pig]:
        async with self._conn.execute(
            f"{_PIG_SELECT} WHERE chat_id = ? ORDER BY weight DESC, id ASC", (chat_id,)
        ) as cursor:
            return [_pig_from_row(row) async for row in cursor]

    async def get_chat_total_players(self, chat_id: int) -> int:
        async with self._conn.execute(
            "SELECT COUNT(*) FROM pigs WHERE chat_id = ?", (chat_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return int(row[0])

    async def get_pig_rank(self, chat_id: int, user_id: int) -> int | None:
        async with self._conn.execute(
            """SELECT rank FROM (
                   SELECT user_id, ROW_NUMBER() OVER (ORDER BY weight DESC, id ASC) AS rank
                   FROM pigs WHERE chat_id = ?
               ) ranked WHERE user_id = ?""",
            (chat_id, user_id),
        ) as cursor:
            row = await cursor.fetchone()
        return None if row is None else int(row[0])

    async def get_pig(self, chat_id: int, user_id: int) -> Pig | None:
        async with self._conn.execute(
            f"{_PIG_SELECT} WHERE chat_id = ? AND user_id = ?", (chat_id, user_id)
        ) as cursor:
            row = await cursor.fetchone()
        return None if row is None else _pig_from_row(row)

    async def _get_pig_by_id(self, pig_id: int) -> Pig:
        async with self._conn.execute(f"{_PIG_SELECT} WHERE id = ?", (pig_id,)) as cursor:
            row = await cursor.fetchone()
        return _pig_from_row(row)

    async def create_pig(self, pig: Pig) -> Pig:
        """Insert a pig and return it with its assigned id."""
        placeholders = ", ".join("?" for _ in _PIG_DATA_COLUMNS)
        try:
            cursor = await self._conn.execute(
                f"INSERT INTO pigs ({', '.join(_PIG_DATA_COLUMNS)}) VALUES ({placeholders})",
                _pig_params(pig),
            )
            pig_id = cursor.lastrowid
            await cursor.close()
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        return await self._get_pig_by_id(pig_id)

    async def update_pig(self, pig: Pig) -> Pig:
        """Store every mutable field of the pig identified by chat and user."""
        params = _pig_params(pig)
        chat_user, rest = params[:2], params[2:]
        assignments = ", ".join(f"{name} = ?" for name in _PIG_DATA_COLUMNS[2:])
        cursor = await self._conn.execute(
            f"UPDATE pigs SET {assignments} WHERE chat_id = ? AND user_id = ?",
            rest + chat_user,
        )
        changed = cursor.rowcount
        await cursor.close()
        await self._conn.commit()
        if changed == 0:
            raise PigNotFoundError(f"no pig for user {pig.user_id} in chat {pig.chat_id}")
        updated = await self.get_pig(pig.chat_id, pig.user_id)
        assert updated is not None
        return updated

    async def get_user_loot(self, chat_id: int, user_id: int) -> list[Loot]:
        async with self._conn.execute(
            f"{_LOOT_SELECT} WHERE chat_id = ? AND owner = ? ORDER BY id", (chat_id, user_id)
        ) as cursor:
            return [_loot_from_row(row) async for row in cursor]

    async def add_loot(self, loot: Loot) -> Loot:
        """Insert a loot item and return it with its assigned id."""
        placeholders = ", ".join("?" for _ in _LOOT_DATA_COLUMNS)
        params = (
            loot.chat_id,
            loot.owner,
            loot.name,
            loot.icon,
            loot.description,
            loot.class_name,
            loot.class_icon,
            loot.weight,
            json.dumps(loot.base_stats),
            json.dumps(loot.rarity),
            str(loot.uuid),
        )
        try:
            cursor = await self._conn.execute(
                f"INSERT INTO loot ({', '.join(_LOOT_DATA_COLUMNS)}) VALUES ({placeholders})",
                params,
            )
            loot_id = cursor.lastrowid
            await cursor.close()
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        async with self._conn.execute(f"{_LOOT_SELECT} WHERE id = ?", (loot_id,)) as cursor:
            row = await cursor.fetchone()
        return _loot_from_row(row)

    async def find_pig_by_name(self, chat_id: int, name: str) -> list[Pig]:
        """Find pigs whose name contains *name*, ignoring case."""
        async with self._conn.execute(
            f"{_PIG_SELECT} WHERE chat_id = ? AND ilike(name, ?) ORDER BY id",
            (chat_id, f"%{name}%"),
        ) as cursor:
            return [_pig_from_row(row) async for row in cursor]