"""Bot configuration loaded from a YAML file, with environment-based defaults."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("config.yaml", "config.yml")

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1


class ConfigError(ValueError):
    """Raised when a configuration document is malformed."""


def _require(data: Mapping[str, Any], key: str, section: str) -> Any:
    if key not in data:
        raise ConfigError(f"{section}: missing field `{key}`")
    return data[key]


def _as_str(data: Mapping[str, Any], key: str, section: str) -> str:
    value = _require(data, key, section)
    if not isinstance(value, str):
        raise ConfigError(f"{section}.{key}: expected a string, got {value!r}")
    return value


def _as_uint(data: Mapping[str, Any], key: str, section: str, maximum: int) -> int:
    value = _require(data, key, section)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{section}.{key}: expected an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise ConfigError(f"{section}.{key}: {value} is out of range")
    return value


def _as_float(data: Mapping[str, Any], key: str, section: str) -> float:
    value = _require(data, key, section)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{section}.{key}: expected a number, got {value!r}")
    return float(value)


def _as_section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _require(data, key, "config")
    if not isinstance(value, Mapping):
        raise ConfigError(f"config.{key}: expected a mapping, got {value!r}")
    return value


@dataclass
class GPTConfig:
    """Settings for the language-model API."""

    llm_api_url: str
    llm_api_token: str

    @classmethod
    def _from_mapping(cls, data: Mapping[str, Any]) -> GPTConfig:
        return cls(
            llm_api_url=_as_str(data, "LLM_API_URL", "gpt"),
            llm_api_token=_as_str(data, "LLM_API_TOKEN", "gpt"),
        )


@dataclass
class GameConfig:
    """Tuning knobs for the pig game."""

    feed_delay: int
    base_growth: float
    rank_factor: float
    weight_factor: float
    salo_delay: int
    max_items: int
    base_pills_chance: float
    base_pills_chance_grow: float

    @classmethod
    def _from_mapping(cls, data: Mapping[str, Any]) -> GameConfig:
        return cls(
            feed_delay=_as_uint(data, "FEED_DELAY", "game", _U64_MAX),
            base_growth=_as_float(data, "BASE_GROWTH", "game"),
            rank_factor=_as_float(data, "RANK_FACTOR", "game"),
            weight_factor=_as_float(data, "WEIGHT_FACTOR", "game"),
            salo_delay=_as_uint(data, "SALO_DELAY", "game", _U64_MAX),
            max_items=_as_uint(data, "MAX_ITEMS", "game", _U32_MAX),
            base_pills_chance=_as_float(data, "BASE_PILLS_CHANCE", "game"),
            base_pills_chance_grow=_as_float(data, "BASE_PILLS_CHANCE_GROW", "game"),
        )

    @classmethod
    def _default(cls) -> GameConfig:
        return cls(
            base_growth=0.1,
            rank_factor=0.5,
            weight_factor=0.05,
            feed_delay=4,
            salo_delay=8,
            max_items=15,
            base_pills_chance=0.33,
            base_pills_chance_grow=0.75,
        )


@dataclass
class Config:
    """Top-level bot configuration."""

    gpt: GPTConfig
    game: GameConfig
    database_url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a configuration from a parsed YAML document."""
        if not isinstance(data, Mapping):
            raise ConfigError(f"config: expected a mapping, got {data!r}")
        database_url = data.get("database_url")
        if database_url is not None and not isinstance(database_url, str):
            raise ConfigError(f"config.database_url: expected a string, got {database_url!r}")
        return cls(
            gpt=GPTConfig._from_mapping(_as_section(data, "gpt")),
            game=GameConfig._from_mapping(_as_section(data, "game")),
            database_url=database_url,
        )

    @classmethod
    def load(cls, directory: str | os.PathLike[str] | None = None) -> Config:
        """Read config.yaml, or config.yml if that is missing, from *directory*."""
        base = Path(directory) if directory is not None else Path.cwd()
        first, second = (base / name for name in CONFIG_FILE_NAMES)
        try:
            content = first.read_text(encoding="utf-8")
        except OSError:
            content = second.read_text(encoding="utf-8")
        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ConfigError(str(exc)) from exc
        return cls.from_dict(document)

    @classmethod
    def load_or_default(cls, directory: str | os.PathLike[str] | None = None) -> Config:
        """Load the configuration, falling back to defaults and environment values."""
        try:
            return cls.load(directory)
        except (OSError, ConfigError) as exc:
            log.warning("Failed to load config: %s, using defaults", exc)
            return cls(
                gpt=GPTConfig(
                    llm_api_url=os.environ.get("LLM_API_URL", ""),
                    llm_api_token=os.environ.get("LLM_API_TOKEN", ""),
                ),
                game=GameConfig._default(),
                database_url=os.environ.get("database_url"),
            )