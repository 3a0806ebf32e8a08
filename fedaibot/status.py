import asyncio
from dataclasses import dataclass

import discord

from .config import STATUS_INTERVAL
from .logger import logger


@dataclass(frozen=True)
class StatusSnapshot:
    text: str = ""
    enabled: bool = False


DISABLED = StatusSnapshot()


class StatusState:
    """The bot's "now playing" text.

    Updates replace the whole snapshot, so readers never see a half-applied
    change. Only two shapes are reachable: DISABLED, or enabled with a
    non-empty text.
    """

    def __init__(self):
        self._snapshot = DISABLED

    @property
    def snapshot(self) -> StatusSnapshot:
        return self._snapshot

    def set_text(self, text: str) -> StatusSnapshot:
        text = text.strip()
        self._snapshot = StatusSnapshot(text=text, enabled=True) if text else DISABLED
        return self._snapshot

    def clear(self) -> StatusSnapshot:
        self._snapshot = DISABLED
        return self._snapshot


def presence_activity(snapshot: StatusSnapshot) -> discord.Game | None:
    if snapshot.enabled:
        return discord.Game(name=snapshot.text)
    return None


async def status_update_loop(client, state: StatusState, interval: float = STATUS_INTERVAL):
    logger.info("Status update loop started (interval=%ss).", interval)

    while True:
        try:
            snapshot = state.snapshot
            await client.change_presence(activity=presence_activity(snapshot))
            logger.debug("Presence pushed: %r", snapshot)
        except asyncio.CancelledError:
            logger.info("Status update loop cancelled.")
            break
        except Exception:
            logger.exception("Error pushing presence")

        try:
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("Status update loop cancelled.")
            break
