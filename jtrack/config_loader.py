"""Load and validate the optional YAML configuration file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from jtrack.storage import STORAGE_KEY
from jtrack.tracker import DEFAULT_FOLLOW_UP_DAYS
from jtrack.stats import DEFAULT_LIMIT, DEFAULT_WEEK_SPAN_DAYS


@dataclass
class StorageSettings:
    data_dir: Path = Path("data")
    key: str = STORAGE_KEY


@dataclass
class DashboardSettings:
    limit: int = DEFAULT_LIMIT
    week_span_days: int = DEFAULT_WEEK_SPAN_DAYS


@dataclass
class Config:
    storage: StorageSettings = field(default_factory=StorageSettings)
    dashboard: DashboardSettings = field(default_factory=DashboardSettings)
    follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS


def _positive_int(section: dict, name: str, default: int, allow_zero: bool = False) -> int:
    value = section.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Config value {name!r} must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"Config value {name!r} must be positive, got {value}")
    return value


def load_config(config_path: Path | None = None) -> Config:
    """Load config.yaml (if given) and .env, validate, return Config.

    ``JTRACK_DATA_DIR`` in the environment wins over ``storage.data_dir``.
    """
    load_dotenv()

    raw: dict = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config not found: {config_path}\n"
                "Copy config.example.yaml to config.yaml and adjust it, or omit --config."
            )
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping at the top level")

    store = raw.get("storage") or {}
    data_dir = os.getenv("JTRACK_DATA_DIR") or store.get("data_dir") or "data"
    key = str(store.get("key") or STORAGE_KEY).strip()
    if not key:
        raise ValueError("Config value 'storage.key' must not be empty")

    apps = raw.get("applications") or {}
    dash = raw.get("dashboard") or {}

    return Config(
        storage=StorageSettings(data_dir=Path(data_dir).expanduser(), key=key),
        dashboard=DashboardSettings(
            limit=_positive_int(dash, "limit", DEFAULT_LIMIT),
            week_span_days=_positive_int(dash, "week_span_days", DEFAULT_WEEK_SPAN_DAYS, allow_zero=True),
        ),
        follow_up_days=_positive_int(apps, "follow_up_days", DEFAULT_FOLLOW_UP_DAYS, allow_zero=True),
    )
