from __future__ import annotations

import asyncio
import contextlib
from types import SimpleNamespace

import discord

import fedaibot.bot as bot_mod
from conftest import make_message
from fedaibot.config import Config

CONFIG = Config(discord_token="T", openai_api_key="K", openai_model="gpt-4")


def _bot() -> bot_mod.Bot:
    bot = bot_mod.Bot(CONFIG)
    bot._connection.user = SimpleNamespace(id=1)
    return bot


async def test_message_content_intent_enabled() -> None:
    assert _bot().intents.message_content is True


async def test_on_message_updates_shared_status() -> None:
    bot = _bot()
    message = make_message("!setgame Among Us", author_id=7)

    await bot.on_message(message)

    assert bot.status_state.snapshot.text == "Among Us"
    assert message.channel.sent[0]["content"] == "Oyun metni güncellendi: Among Us"


async def test_on_message_ignores_own_messages() -> None:
    bot = _bot()
    message = make_message("!setgame Among Us", author_id=1)

    await bot.on_message(message)

    assert bot.status_state.snapshot.enabled is False
    assert message.channel.sent == []


async def test_ask_model_uses_configured_credentials(monkeypatch) -> None:
    calls = []

    async def _fake_complete(prompt, **kwargs):
        calls.append((prompt, kwargs))
        return "Hi there"

    monkeypatch.setattr(bot_mod, "complete", _fake_complete)
    bot = _bot()
    message = make_message("!f hello", author_id=7)

    await bot.on_message(message)

    prompt, kwargs = calls[0]
    assert prompt == "hello"
    assert kwargs["api_key"] == "K"
    assert kwargs["model"] == "gpt-4"
    assert message.channel.sent[0]["embed"].description == "Hi there"


class _FakeSession:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


async def _idle_status_loop(client, state, interval) -> None:
    await asyncio.Event().wait()


async def test_on_ready_starts_status_task_once(monkeypatch) -> None:
    monkeypatch.setattr(bot_mod, "status_update_loop", _idle_status_loop)
    bot = _bot()

    await bot.on_ready()
    first = bot.status_task
    await bot.on_ready()

    assert first is not None
    assert bot.status_task is first
    first.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await first


async def test_on_ready_restarts_finished_status_task(monkeypatch) -> None:
    monkeypatch.setattr(bot_mod, "status_update_loop", _idle_status_loop)
    bot = _bot()

    await bot.on_ready()
    first = bot.status_task
    first.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await first

    await bot.on_ready()

    assert bot.status_task is not first
    bot.status_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await bot.status_task


async def test_close_cancels_status_task_and_session(monkeypatch) -> None:
    closed = []

    async def _client_close(self) -> None:
        closed.append(self)

    monkeypatch.setattr(bot_mod, "status_update_loop", _idle_status_loop)
    monkeypatch.setattr(discord.Client, "close", _client_close)
    bot = _bot()
    session = _FakeSession()
    bot.http_session = session

    await bot.on_ready()
    task = bot.status_task
    await bot.close()

    assert task.cancelled()
    assert bot.status_task is None
    assert session.closed is True
    assert bot.http_session is None
    assert closed == [bot]
