"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitLab"
    DB_FILENAME = "habitlab.db"
    CLOUD_DB_FILENAME = "habitlab-cloud.db"
    WIDGET_SNAPSHOT_FILENAME = "widget-snapshot.json"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITLAB_DEV_MODE", default=True)
        self.SYNC_ENABLED_DEFAULT = _env_bool("HABITLAB_SYNC_ENABLED", default=False)
        self.DATABASE_URL = os.getenv("HABITLAB_DATABASE_URL", self._build_sqlite_url(self.DB_FILENAME))
        self.CLOUD_DATABASE_URL = os.getenv(
            "HABITLAB_CLOUD_DATABASE_URL", self._build_sqlite_url(self.CLOUD_DB_FILENAME)
        )
        self.TIMEZONE = self._resolve_timezone(os.getenv("HABITLAB_TIMEZONE", "UTC"))

    def _resolve_data_dir(self) -> Path:
        """Return the directory where SQLite files and snapshots live."""

        data_root = os.getenv("HABITLAB_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _resolve_timezone(name: str) -> ZoneInfo:
        """Parse the configured IANA zone; day keys are anchored to it."""

        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"HABITLAB_TIMEZONE is not a known time zone: {name!r}") from exc

    def _build_sqlite_url(self, filename: str) -> str:
        return f"sqlite:///{self.DATA_DIR / filename}"

    def database_url(self, *, sync_enabled: bool) -> str:
        """Pick the store URL for the given sync setting."""

        return self.CLOUD_DATABASE_URL if sync_enabled else self.DATABASE_URL

    @property
    def widget_snapshot_path(self) -> Path:
        return self.DATA_DIR / self.WIDGET_SNAPSHOT_FILENAME

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}
