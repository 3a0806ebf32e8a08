import asyncio
import contextlib

import aiohttp
import discord

from .commands import CommandDispatcher
from .config import Config, OPENAI_TIMEOUT, STATUS_INTERVAL
from .logger import logger
from .openai_api import complete
from .status import StatusState, status_update_loop


class Bot(discord.Client):
    def __init__(self, config: Config, status_interval: float = STATUS_INTERVAL):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)

        self.config = config
        self.status_interval = status_interval
        self.status_state = StatusState()
        self.status_task: asyncio.Task | None = None
        self.http_session: aiohttp.ClientSession | None = None
        self.dispatcher = CommandDispatcher(self.status_state, self.ask_model)

    async def setup_hook(self):
        self.http_session = aiohttp.ClientSession()

    async def ask_model(self, prompt: str) -> str:
        return await complete(
            prompt,
            api_key=self.config.openai_api_key,
            model=self.config.openai_model,
            session=self.http_session,
            timeout=OPENAI_TIMEOUT,
        )

    # ---------------- BOT READY EVENT ----------------
    async def on_ready(self):
        logger.info("Bot ready | %s (id=%s)", self.user, self.user.id)

        # on_ready fires again after reconnects
        if self.status_task is None or self.status_task.done():
            self.status_task = asyncio.create_task(
                status_update_loop(self, self.status_state, self.status_interval)
            )

    # ---------------- MESSAGE EVENTS ----------------
    async def on_message(self, message: discord.Message):
        await self.dispatcher.handle(message, self.user.id)

    async def close(self):
        logger.info("Shutting down bot...")
        if self.status_task:
            self.status_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.status_task
            self.status_task = None

        if self.http_session is not None:
            await self.http_session.close()
            self.http_session = None

        await super().close()
