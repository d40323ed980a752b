# utotool

An asyncio library of chat bot modules. Each feature is a `BotModule`. A
`ModuleManager` passes commands and plain messages to the registered modules.
The package includes two modules:

- **Pig Game** (`utotool.pig_game.PigGameModule`). Each user in a chat raises
  a pig. It supports these commands:
  - `pig [name]` creates a pig. With no name, it picks a random default name.
  - `grow` feeds the pig. If the user has no pig yet, it creates one first.
  - `my` shows the user's pig.
  - `pigstats [name]` shows the first pig whose name contains `name`,
    ignoring case. With no name, it shows the user's own pig.

  A feeding changes the weight by a random whole number. That number lies
  between the bounds that `calculate_grow_range(score, rank, total_players,
  config)` returns. The bounds depend on the pig's current weight and on its
  rank in the chat. A pig never weighs less than 1 kg after a feeding.
- **Powerful Nahruk** (`utotool.nahruk.PowerfulNahrukModule`). It checks the
  text of each plain message with `check_nahruk(text)`. If the text contains a
  trigger word, the module replies to that message with a blocking notice and
  marks the message as handled.

Pigs and loot items are stored in SQLite through `aiosqlite`
(`utotool.database.Database`).

## Installation

```
pip install .
pip install ".[test]"   # with test dependencies
```

## Configuration

`Config.load(directory)` reads `config.yaml` from `directory`. If that file is
missing, it reads `config.yml`. With no directory, it uses the current working
directory.

```yaml
gpt:
  LLM_API_URL: "http://localhost:8000"
  LLM_API_TOKEN: "token"
game:
  FEED_DELAY: 4
  BASE_GROWTH: 0.1
  RANK_FACTOR: 0.5
  WEIGHT_FACTOR: 0.05
  SALO_DELAY: 8
  MAX_ITEMS: 15
  BASE_PILLS_CHANCE: 0.33
  BASE_PILLS_CHANCE_GROW: 0.75
database_url: "pigs.db"
```

`load` raises `ConfigError` (a `ValueError`) when a field is missing, has the
wrong type or is out of range. It raises `OSError` when neither file can be
read. `Config.from_dict(data)` builds a configuration from a mapping that has
already been parsed.

`Config.load_or_default(directory)` catches both of those errors. It logs a
warning and returns the built-in game defaults. The environment variables
`LLM_API_URL`, `LLM_API_TOKEN` and `database_url` supply the other fields.

## Storage

`Database.connect(url)` accepts a file path, `:memory:`, or a `sqlite:` /
`sqlite://` URL. Call `migrate()` to create the `pigs` and `loot` tables. A
`Database` can be used with `async with`, which closes it when the block ends.

The class has these methods:

- `get_pig`, `create_pig`, `update_pig` and `find_pig_by_name`.
- `get_chat_pigs_ranked` lists a chat's pigs, heaviest first. Ties are broken
  by creation order.
- `get_pig_rank` returns a pig's position in that list.
- `get_chat_total_players`.
- `get_user_loot` and `add_loot`. Loot `base_stats` and `rarity` are stored as
  JSON.

`update_pig` raises `PigNotFoundError` if no pig matches its chat and user.

## Usage

```python
import asyncio

from utotool.bot_module import Bot, Message, ModuleManager, SentMessage
from utotool.config import Config
from utotool.database import Database
from utotool.nahruk import PowerfulNahrukModule
from utotool.pig_game import PigGameModule


async def deliver(message: SentMessage) -> None:
    print(f"[{message.chat_id}] {message.text}")


async def main() -> None:
    config = Config.load_or_default(".")
    async with await Database.connect(config.database_url or ":memory:") as db:
        await db.migrate()

        manager = ModuleManager()
        manager.register_module(PigGameModule())
        manager.register_module(PowerfulNahrukModule())
        print("\n".join(manager.get_all_commands()))

        bot = Bot(sender=deliver)
        msg = Message(chat_id=1, message_id=10, text="/grow", user_id=42, username="alice")
        handled = await manager.handle_command(bot, msg, "grow", [], db, config)
        if not handled:
            await manager.handle_message(bot, msg, db, config)


asyncio.run(main())
```

`Bot.send_message(chat_id, text, reply_to=None)` builds a `SentMessage`. It
passes the message to the optional `sender` coroutine, then adds it to
`bot.sent`.

## What the package does not do

- It does not connect to any chat service. Nothing receives updates or parses
  `/command` text. You supply the `Message` objects, the command name and its
  arguments, and a `sender` that delivers replies.
- It has no command-line program or long-running bot process.
- The game uses only `BASE_GROWTH`, `RANK_FACTOR` and `WEIGHT_FACTOR`.
  `FEED_DELAY`, `SALO_DELAY`, `MAX_ITEMS`, the pill chances and the `gpt`
  settings are loaded but nothing uses them. Feeding has no cooldown.
- The pig fields for salo, poisoning, buildings and pills are stored and shown,
  and loot items can be stored, but no command changes them.

## Tests

```
pytest
```