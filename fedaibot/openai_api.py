import asyncio
from dataclasses import dataclass, field

import aiohttp

from .config import OPENAI_TIMEOUT
from .logger import logger

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
SYSTEM_PROMPT = "You are a helpful assistant."


class CompletionError(Exception):
    """The completion API call failed or returned something unusable."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class EmptyCompletionError(CompletionError):
    """The completion API answered without any choices."""


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class Choice:
    role: str
    content: str


@dataclass(frozen=True)
class ChatCompletion:
    id: str = ""
    object: str = ""
    model: str = ""
    created: int = 0
    choices: list[Choice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)

    @classmethod
    def from_dict(cls, data) -> "ChatCompletion":
        if not isinstance(data, dict) or not isinstance(data.get("choices"), list):
            raise CompletionError("Completion response has no choices list")

        choices = []
        for raw in data["choices"]:
            message = raw.get("message") if isinstance(raw, dict) else None
            if not isinstance(message, dict) or not isinstance(message.get("content"), str):
                raise CompletionError("Completion choice has no message content")
            choices.append(Choice(role=message.get("role", "assistant"), content=message["content"]))

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        return cls(
            id=data.get("id", ""),
            object=data.get("object", ""),
            model=data.get("model", ""),
            created=data.get("created", 0),
            choices=choices,
            usage=Usage(
                prompt_tokens=usage.get("prompt_tokens") or 0,
                completion_tokens=usage.get("completion_tokens") or 0,
                total_tokens=usage.get("total_tokens") or 0,
            ),
        )


def _openai_headers(api_key: str) -> dict:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def build_payload(message: str, model: str) -> dict:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": message},
        ],
    }


async def chat_completion(
    session: aiohttp.ClientSession,
    message: str,
    *,
    api_key: str,
    model: str,
    timeout: float = OPENAI_TIMEOUT,
) -> ChatCompletion:
    payload = build_payload(message, model)

    try:
        async with session.post(
            CHAT_COMPLETIONS_URL,
            json=payload,
            headers=_openai_headers(api_key),
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            if resp.status != 200:
                body = await resp.text()
                logger.error("Completion API error HTTP %s: %s", resp.status, body)
                raise CompletionError(f"Completion API returned HTTP {resp.status}", status=resp.status)

            data = await resp.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise CompletionError(f"Completion request failed: {e!r}") from e
    except ValueError as e:
        raise CompletionError("Completion response is not valid JSON") from e

    completion = ChatCompletion.from_dict(data)
    logger.info(
        "Completion %s from %s (%d choices, %d tokens)",
        completion.id or "<no id>",
        completion.model or model,
        len(completion.choices),
        completion.usage.total_tokens,
    )
    return completion


async def complete(
    message: str,
    *,
    api_key: str,
    model: str,
    session: aiohttp.ClientSession | None = None,
    timeout: float = OPENAI_TIMEOUT,
) -> str:
    """Send `message` to the completion API and return the first answer.

    Raises CompletionError on transport/decoding failures and
    EmptyCompletionError when the API returns zero choices.
    """
    if session is None:
        async with aiohttp.ClientSession() as own_session:
            return await complete(
                message, api_key=api_key, model=model, session=own_session, timeout=timeout
            )

    completion = await chat_completion(
        session, message, api_key=api_key, model=model, timeout=timeout
    )
    if not completion.choices:
        raise EmptyCompletionError("Completion API returned no choices")

    return completion.choices[0].content
