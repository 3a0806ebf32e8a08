import asyncio
import logging
import os
from datetime import datetime, timedelta

from dotenv import load_dotenv

DEFAULT_LOG_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs"
)


def resolve_log_dir(dotenv_path: str | None = None) -> str:
    # Imported before config.py, so .env has to be loaded here as well
    load_dotenv(dotenv_path)
    return os.getenv("FEDAI_LOG_DIR") or DEFAULT_LOG_DIR


LOG_DIR = resolve_log_dir()
LOG_PREFIX = "bot-"
LOG_RETENTION_DAYS = 7

os.makedirs(LOG_DIR, exist_ok=True)

logger = logging.getLogger("fedai_bot")
logger.setLevel(logging.INFO)

_log_formatter = logging.Formatter(
    "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
)

# Console handler
_console_handler = logging.StreamHandler()
_console_handler.setFormatter(_log_formatter)
logger.addHandler(_console_handler)

# discord.py logs through its own hierarchy; keep it out of DEBUG noise
logging.getLogger("discord").setLevel(logging.INFO)

_file_handler = None


def _log_path_for_date(dt: datetime, log_dir: str = LOG_DIR) -> str:
    return os.path.join(log_dir, f"{LOG_PREFIX}{dt.strftime('%Y-%m-%d')}.log")


def setup_file_handler_for_today():
    """Point the file handler at today's log file, replacing yesterday's."""
    global _file_handler

    if _file_handler is not None:
        logger.removeHandler(_file_handler)
        _file_handler.close()

    path = _log_path_for_date(datetime.now())
    _file_handler = logging.FileHandler(path, encoding="utf-8")
    _file_handler.setFormatter(_log_formatter)
    logger.addHandler(_file_handler)
    logger.info("Log file handler set to %s", path)


def cleanup_old_logs(retention_days: int = LOG_RETENTION_DAYS, log_dir: str = LOG_DIR) -> list[str]:
    """Delete bot log files older than `retention_days` days.

    Returns the paths that were removed.
    """
    removed = []
    cutoff = datetime.now().date() - timedelta(days=retention_days)

    try:
        filenames = os.listdir(log_dir)
    except OSError:
        logger.exception("Could not list log directory %s", log_dir)
        return removed

    for filename in filenames:
        if not (filename.startswith(LOG_PREFIX) and filename.endswith(".log")):
            continue

        date_str = filename[len(LOG_PREFIX):-len(".log")]
        try:
            file_date = datetime.strptime(date_str, "%Y-%m-%d").date()
        except ValueError:
            continue

        if file_date < cutoff:
            full_path = os.path.join(log_dir, filename)
            try:
                os.remove(full_path)
                removed.append(full_path)
                logger.info("Deleted old log file: %s", full_path)
            except OSError as e:
                logger.error("Failed to delete old log file %s: %s", full_path, e)

    return removed


async def log_maintenance_loop():
    """Rotate logs daily and clean up old files."""
    while True:
        try:
            now = datetime.now()
            tomorrow = (now + timedelta(days=1)).replace(
                hour=0, minute=0, second=5, microsecond=0
            )
            await asyncio.sleep((tomorrow - now).total_seconds())

            logger.info("Running daily log rotation & cleanup...")
            setup_file_handler_for_today()
            cleanup_old_logs()
            logger.info("Log rotation & cleanup complete.")
        except asyncio.CancelledError:
            logger.info("Log maintenance loop cancelled.")
            break
        except Exception:
            logger.exception("Error in log maintenance loop")


# Initialize today's file handler immediately
setup_file_handler_for_today()
cleanup_old_logs()
