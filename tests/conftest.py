from __future__ import annotations

import os
import tempfile
from types import SimpleNamespace
from typing import Any


# Keep test runs from writing into the repository's logs/ directory.
os.environ.setdefault("FEDAI_LOG_DIR", tempfile.mkdtemp(prefix="fedai-logs-"))


class FakeChannel:
    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send(self, content: str | None = None, *, embed=None) -> None:
        self.sent.append({"content": content, "embed": embed})


def make_message(content: str, author_id: int = 42, channel: FakeChannel | None = None):
    author = SimpleNamespace(id=author_id, name=f"user{author_id}")
    return SimpleNamespace(content=content, author=author, channel=channel or FakeChannel())
