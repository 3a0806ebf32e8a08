import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

CONFIG_PATH = os.getenv("FEDAI_CONFIG", "config.json")

STATUS_INTERVAL = float(os.getenv("STATUS_INTERVAL", "60"))
OPENAI_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "30"))

_REQUIRED_KEYS = ("discord_token", "openai_api_key", "openai_model")


class ConfigError(Exception):
    """Raised when the startup config file is missing or malformed."""


@dataclass(frozen=True)
class Config:
    discord_token: str
    openai_api_key: str
    openai_model: str


def load_config(path: str = CONFIG_PATH) -> Config:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Config file could not be read: {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Config file could not be parsed: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {path}")

    for key in _REQUIRED_KEYS:
        if not isinstance(data.get(key), str):
            raise ConfigError(f"Config key {key!r} missing or not a string in {path}")

    return Config(
        discord_token=data["discord_token"],
        openai_api_key=data["openai_api_key"],
        openai_model=data["openai_model"],
    )
