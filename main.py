import asyncio
import contextlib
import signal
import sys

import discord

from fedaibot.bot import Bot
from fedaibot.config import CONFIG_PATH, ConfigError, load_config
from fedaibot.logger import log_maintenance_loop, logger


_shutdown_tasks: set[asyncio.Task] = set()


def request_shutdown(bot: Bot, sig: signal.Signals) -> asyncio.Task:
    logger.info("Received %s, closing gateway connection...", sig.name)
    task = asyncio.create_task(bot.close())
    _shutdown_tasks.add(task)
    task.add_done_callback(_shutdown_tasks.discard)
    return task


def _register_signal_handlers(bot: Bot):
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, bot, sig)
        except NotImplementedError:
            # Event loop does not support add_signal_handler (e.g. on Windows)
            pass


async def main() -> int:
    try:
        config = load_config(CONFIG_PATH)
    except ConfigError as e:
        logger.critical("%s", e)
        return 1

    bot = Bot(config)
    _register_signal_handlers(bot)

    log_maintenance_task = asyncio.create_task(log_maintenance_loop())

    try:
        async with bot:
            await bot.start(config.discord_token)
    except discord.LoginFailure as e:
        logger.critical("Discord login failed: %s", e)
        return 1
    finally:
        logger.info("Shutting down log maintenance task...")
        log_maintenance_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await log_maintenance_task

    logger.info("Bot stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
