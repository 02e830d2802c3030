import logging
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env at startup
load_dotenv()


def _get_env_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _get_env_int(key: str, default: int) -> int:
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class Config:
    # Factories so that reload_from_env() sees the refreshed environment
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_env_int("PORT", 8000))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    # Optional port snapshot (raw API shape) loaded when the app starts
    snapshot_path: str = field(default_factory=lambda: os.getenv("SNAPSHOT_PATH", ""))
    load_ship_types: bool = field(default_factory=lambda: _get_env_bool("LOAD_SHIP_TYPES", True))
    # Empty means the table bundled under assets/
    ship_types_path: str = field(default_factory=lambda: os.getenv("SHIP_TYPES_PATH", ""))
    # Window in which the port call following an expedition result is ignored
    exped_return_grace_s: float = field(default_factory=lambda: _get_env_float("EXPED_RETURN_GRACE_S", 5.0))
    ws_max_queue: int = field(default_factory=lambda: _get_env_int("WS_MAX_QUEUE", 100))


CONFIG = Config()


def reload_from_env() -> Config:
    """Reload environment variables from .env and rebuild CONFIG.

    Returns the new CONFIG instance.
    """
    load_dotenv(override=True)
    global CONFIG
    CONFIG = Config()
    return CONFIG


def configure_logging(level: str = "") -> None:
    logging.basicConfig(
        level=(level or CONFIG.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
