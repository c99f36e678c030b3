"""Global configuration for timemaster.

Stores user preferences in ~/.timemaster/config.json (the directory can be
moved with TIMEMASTER_HOME). Environment variables override the file:

    TIMEMASTER_BACKEND     memory | json | sqlite
    TIMEMASTER_DATA_DIR    where the store keeps its files
    TIMEMASTER_LOG_LEVEL   logging level name
    TIMEMASTER_SEED        1/true to create sample tasks in an empty store
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TIMEMASTER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


class StoreBackend(str, Enum):
    """Which task store implementation to use."""

    MEMORY = "memory"
    JSON = "json"
    SQLITE = "sqlite"


def get_config_dir() -> Path:
    """Get the timemaster config directory."""
    raw = os.environ.get(_k("HOME"))
    config_dir = Path(raw).expanduser() if raw else Path.home() / ".timemaster"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def _default_data_dir() -> Path:
    return get_config_dir() / "data"


class Settings(BaseModel):
    """Runtime settings for the task store and logging."""

    backend: StoreBackend = StoreBackend.JSON
    data_dir: Path = Field(default_factory=_default_data_dir)
    log_level: str = "WARNING"
    seed_on_empty: bool = False

    @property
    def sqlite_path(self) -> Path:
        """Database file used by the sqlite backend."""
        return self.data_dir / "timemaster.db"


def _env_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _apply_env(data: dict) -> dict:
    overrides = {
        "backend": os.environ.get(_k("BACKEND")),
        "data_dir": os.environ.get(_k("DATA_DIR")),
        "log_level": os.environ.get(_k("LOG_LEVEL")),
    }
    for key, value in overrides.items():
        if value is not None and value.strip():
            data[key] = value.strip()
    seed = os.environ.get(_k("SEED"))
    if seed is not None:
        data["seed_on_empty"] = _env_bool(seed)
    return data


def get_settings() -> Settings:
    """Load settings from the config file, then apply env overrides.

    An unreadable or invalid config file is ignored in favour of defaults.
    """
    config_file = get_config_dir() / "config.json"
    data: dict = {}
    if config_file.exists():
        try:
            loaded = json.loads(config_file.read_text(encoding="utf-8"))
            if isinstance(loaded, dict):
                Settings(**loaded)
                data = loaded
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.warning(f"Ignoring invalid config file {config_file}: {e}")

    try:
        settings = Settings(**_apply_env(dict(data)))
    except ValidationError as e:
        logger.warning(f"Ignoring invalid environment overrides: {e}")
        settings = Settings(**data)

    settings.data_dir = settings.data_dir.expanduser()
    return settings


def save_settings(settings: Settings) -> None:
    """Save settings to the config file."""
    config_file = get_config_dir() / "config.json"
    config_file.write_text(
        json.dumps(settings.model_dump(mode="json"), indent=2),
        encoding="utf-8",
    )
