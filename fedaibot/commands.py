from typing import Awaitable, Callable

import discord

from .logger import logger
from .openai_api import CompletionError
from .status import StatusState

SETGAME_COMMAND = "!setgame"
COMPLETION_COMMAND = "!f"

EMBED_TITLE = "Fedai-YapayZeka Destekli Discord Botu:"
EMBED_COLOR = 0x00FF00


def parse_command(content: str, token: str) -> str | None:
    """Return the argument of `token` if `content` invokes it, else None.

    The token must be followed by whitespace or the end of the message, so
    `!foo` is not an invocation of `!f`.
    """
    if not content.startswith(token):
        return None

    rest = content[len(token):]
    if not rest:
        return ""
    if not rest[0].isspace():
        return None
    return rest[1:]


def completion_embed(answer: str) -> discord.Embed:
    return discord.Embed(title=EMBED_TITLE, color=EMBED_COLOR, description=answer)


class CommandDispatcher:
    def __init__(self, state: StatusState, complete: Callable[[str], Awaitable[str]]):
        self.state = state
        self.complete = complete

    async def handle(self, message, own_id) -> None:
        if message.author.id == own_id:
            return

        content = message.content

        arg = parse_command(content, SETGAME_COMMAND)
        if arg is not None:
            logger.info("[COMMAND] %s ran: %s", message.author, content)
            await self.set_game(message, arg)
            return

        arg = parse_command(content, COMPLETION_COMMAND)
        if arg is not None:
            logger.info("[COMMAND] %s ran: %s", message.author, content)
            await self.ask(message, arg)

    async def set_game(self, message, text: str) -> None:
        snapshot = self.state.set_text(text)
        if snapshot.enabled:
            logger.info("Status text set to %r by %s", snapshot.text, message.author)
            await message.channel.send(f"Oyun metni güncellendi: {snapshot.text}")
        else:
            logger.info("Status text cleared by %s", message.author)
            await message.channel.send("Oyun metni temizlendi.")

    async def ask(self, message, prompt: str) -> None:
        prompt = prompt.strip()
        if not prompt:
            logger.info("!f ignored for %s: empty prompt", message.author)
            return

        try:
            answer = await self.complete(prompt)
        except CompletionError as e:
            logger.error("Completion failed for %s: %s", message.author, e)
            return

        try:
            await message.channel.send(embed=completion_embed(answer))
        except discord.HTTPException as e:
            logger.error("Could not send answer for %s: %s", message.author, e)
            return

        logger.info("!f answered for %s (%d chars)", message.author, len(answer))
