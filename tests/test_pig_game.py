import random
import time

import pytest

from utotool.bot_module import Bot, Message
from utotool.config import Config, GameConfig, GPTConfig
from utotool.database import Database, Pig
from utotool.pig_game import (
    PIG_NAMES,
    PigGameModule,
    calculate_grow_range,
    generate_default_pig_name,
)

CHAT = 100


class _FixedRandom(random.Random):
    def __init__(self, pick):
        super().__init__(0)
        self._pick = pick

    def randint(self, a, b):
        return self._pick(a, b)


def _game_config():
    return GameConfig(
        feed_delay=4,
        base_growth=0.1,
        rank_factor=0.5,
        weight_factor=0.05,
        salo_delay=8,
        max_items=15,
        base_pills_chance=0.33,
        base_pills_chance_grow=0.75,
    )


def _config():
    return Config(gpt=GPTConfig(llm_api_url="", llm_api_token=""), game=_game_config())


async def _open_db(migrate=True):
    db = await Database.connect(":memory:")
    if migrate:
        await db.migrate()
    return db


def _msg(user_id=7, username="alice"):
    return Message(chat_id=CHAT, message_id=1, text="/cmd", user_id=user_id, username=username)


def test_grow_range_single_player_new_pig():
    assert calculate_grow_range(0.0, 1, 1, _game_config()) == (-15, 35)


def test_grow_range_worked_example():
    assert calculate_grow_range(100.0, 1, 2, _game_config()) == (-17, 41)


def test_grow_range_rank_effect():
    config = _game_config()
    top_min, top_max = calculate_grow_range(1000.0, 1, 10, config)
    last_min, last_max = calculate_grow_range(1000.0, 10, 10, config)
    assert top_min < last_min
    assert top_max < last_max
    assert top_min < 0 < top_max


def test_grow_range_widens_with_score():
    config = _game_config()
    small = calculate_grow_range(10.0, 1, 4, config)
    large = calculate_grow_range(1000.0, 1, 4, config)
    assert large[0] <= small[0]
    assert large[1] >= small[1]


def test_grow_range_rejects_empty_chat():
    with pytest.raises(ValueError):
        calculate_grow_range(10.0, 1, 0, _game_config())


def test_default_name_from_list():
    rng = random.Random(42)
    names = {generate_default_pig_name(rng) for _ in range(50)}
    assert names <= set(PIG_NAMES)
    assert generate_default_pig_name() in PIG_NAMES


def test_commands_listed():
    module = PigGameModule()
    assert [cmd for cmd, _ in module.commands()] == ["pig", "grow", "my", "pigstats"]
    assert module.name() == "Pig Game"


@pytest.mark.asyncio
async def test_pig_command_creates_pig():
    async with await _open_db() as db:
        bot = Bot()
        await PigGameModule().handle_command(bot, _msg(), "pig", ["Boris", "II"], db, _config())
        pig = await db.get_pig(CHAT, 7)
        assert pig.name == "Boris II"
        assert pig.owner_name == "alice"
        assert bot.sent[-1].text == "🐷 Поздравляем! alice создал свинью: Boris II (вес: 0)"


@pytest.mark.asyncio
async def test_pig_command_existing_pig():
    async with await _open_db() as db:
        bot = Bot()
        module = PigGameModule()
        await module.handle_command(bot, _msg(), "pig", ["Boris"], db, _config())
        await module.handle_command(bot, _msg(), "pig", ["Other"], db, _config())
        assert bot.sent[-1].text == "У вас уже есть свинья: Boris (вес: 0)"
        assert (await db.get_pig(CHAT, 7)).name == "Boris"


@pytest.mark.asyncio
async def test_pig_command_default_name_and_unknown_owner():
    async with await _open_db() as db:
        bot = Bot()
        msg = Message(chat_id=CHAT, user_id=3)
        await PigGameModule(random.Random(1)).handle_command(bot, msg, "pig", [], db, _config())
        pig = await db.get_pig(CHAT, 3)
        assert pig.name in PIG_NAMES
        assert pig.owner_name == "Unknown"


@pytest.mark.asyncio
async def test_feed_pig_loss_is_clamped_to_one():
    async with await _open_db() as db:
        module = PigGameModule(_FixedRandom(lambda a, b: a))
        pig = await module.create_new_pig(CHAT, 7, "alice", "Borka", db)
        before = time.time()
        text = await module.feed_pig(pig, db, _config())
        assert pig.weight == 1
        assert text.startswith("🐖 Ваш Borka уменьшился на 15 кг \n💪 Теперь он весит 1 кг.")
        stored = await db.get_pig(CHAT, 7)
        assert stored.weight == 1
        assert stored.last_feed >= before


@pytest.mark.asyncio
async def test_feed_pig_gain():
    async with await _open_db() as db:
        module = PigGameModule(_FixedRandom(lambda a, b: b))
        pig = await module.create_new_pig(CHAT, 7, "alice", "Borka", db)
        text = await module.feed_pig(pig, db, _config())
        assert pig.weight == 35
        assert "поправился на 35 кг" in text


@pytest.mark.asyncio
async def test_feed_pig_zero_growth():
    async with await _open_db() as db:
        module = PigGameModule(_FixedRandom(lambda a, b: 0))
        pig = await module.create_new_pig(CHAT, 7, "alice", "Borka", db)
        pig.weight = 20
        await db.update_pig(pig)
        text = await module.feed_pig(pig, db, _config())
        assert pig.weight == 20
        assert "обосрался и нихуя не прибавил" in text


@pytest.mark.asyncio
async def test_grow_creates_and_feeds():
    async with await _open_db() as db:
        bot = Bot()
        module = PigGameModule(random.Random(3))
        for _ in range(5):
            await module.handle_command(bot, _msg(), "grow", ["Hog"], db, _config())
            pig = await db.get_pig(CHAT, 7)
            assert pig.weight >= 1
        assert pig.name == "Hog"
        assert len(bot.sent) == 5
        assert all(m.text.startswith("🐖 Ваш Hog ") for m in bot.sent)


@pytest.mark.asyncio
async def test_my_without_pig():
    async with await _open_db() as db:
        bot = Bot()
        await PigGameModule().handle_command(bot, _msg(), "my", [], db, _config())
        assert bot.sent[-1].text == "У вас нет свиньи! Создайте её командой /pig <имя>"


@pytest.mark.asyncio
async def test_my_with_pig():
    async with await _open_db() as db:
        await db.create_pig(
            Pig(chat_id=CHAT, user_id=7, name="Borka", owner_name="alice", weight=12, barn=2)
        )
        bot = Bot()
        await PigGameModule().handle_command(bot, _msg(), "my", [], db, _config())
        text = bot.sent[-1].text
        assert text.startswith("🐷 Ваша свинья: Borka\n💪 Вес: 12\n🏠 Сарай: 2\n")
        assert text.endswith("📊 Статус: 😊 Здорова")


@pytest.mark.asyncio
async def test_pigstats_by_name_and_missing():
    async with await _open_db() as db:
        await db.create_pig(
            Pig(chat_id=CHAT, user_id=9, name="Big Borka", owner_name="carol", weight=50)
        )
        bot = Bot()
        module = PigGameModule()
        await module.handle_command(bot, _msg(), "pigstats", ["borka"], db, _config())
        assert bot.sent[-1].text == "🐷 Big Borka\n👤 Владелец: carol\n💪 Вес: 50\n🏠 Сарай: 0"
        await module.handle_command(bot, _msg(), "pigstats", ["nobody"], db, _config())
        assert bot.sent[-1].text == "Свинья с именем 'nobody' не найдена"


@pytest.mark.asyncio
async def test_pigstats_own_pig():
    async with await _open_db() as db:
        bot = Bot()
        module = PigGameModule()
        await module.handle_command(bot, _msg(), "pigstats", [], db, _config())
        assert bot.sent[-1].text == "У вас нет свиньи!"
        await module.handle_command(bot, _msg(), "pig", ["Borka"], db, _config())
        await module.handle_command(bot, _msg(), "pigstats", [], db, _config())
        assert bot.sent[-1].text == "🐷 Ваша свинья: Borka\n💪 Вес: 0\n🏠 Сарай: 0"


@pytest.mark.asyncio
async def test_unknown_command():
    async with await _open_db() as db:
        bot = Bot()
        await PigGameModule().handle_command(bot, _msg(), "dance", [], db, _config())
        assert bot.sent[-1].text == "Неизвестная команда свиньи"


@pytest.mark.asyncio
async def test_database_error_is_reported():
    async with await _open_db(migrate=False) as db:
        bot = Bot()
        await PigGameModule().handle_command(bot, _msg(), "my", [], db, _config())
        assert bot.sent[-1].text == "Ошибка базы данных"