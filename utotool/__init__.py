"""Asyncio chat bot modules: a pig-growing game, a trigger-word filter and SQLite storage."""

__version__ = "0.1.0"