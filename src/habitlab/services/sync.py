"""Cloud-sync setting and store migration.

The sync flag lives in the ``app_setting`` table of the local store and is
passed explicitly to ``create_store``; nothing reads it from process state.
"""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session

from ..config import BaseConfig
from ..infra.database import create_store
from ..infra.repositories.settings import SQLModelSettingsRepository
from ..logging_config import get_logger
from .export_json import build_payload, import_payload

logger = get_logger(__name__)

SYNC_ENABLED_KEY = "sync.cloud.enabled"


class SyncSettings:
    """Read/write access to the persisted cloud-sync flag."""

    def __init__(self, settings_repo: SQLModelSettingsRepository, default: bool = False):
        self.settings_repo = settings_repo
        self.default = default

    @classmethod
    def from_config(
        cls, config: BaseConfig, session_factory: Callable[[], Session]
    ) -> "SyncSettings":
        return cls(SQLModelSettingsRepository(session_factory), default=config.SYNC_ENABLED_DEFAULT)

    def is_enabled(self) -> bool:
        setting = self.settings_repo.get(SYNC_ENABLED_KEY)
        if setting is None:
            return self.default
        return setting.value == "true"

    def set_enabled(self, enabled: bool) -> None:
        self.settings_repo.set(
            SYNC_ENABLED_KEY,
            "true" if enabled else "false",
            description="Store habits in the synced database",
        )


def migrate_sync(
    enabled: bool,
    *,
    config: BaseConfig,
    source_factory: Callable[[], Session],
    settings: SyncSettings,
    target_factory: Optional[Callable[[], Session]] = None,
):
    """Copy all data into the store for ``enabled`` and persist the flag.

    Returns the target session factory so the caller can switch to it. No
    conflict resolution is attempted: the import upserts by id.
    """

    payload = build_payload(source_factory)
    if target_factory is None:
        _engine, target_factory = create_store(config, sync_enabled=enabled)
    habits, completions = import_payload(target_factory, payload)
    settings.set_enabled(enabled)
    logger.info(
        f"Sync {'enabled' if enabled else 'disabled'}; migrated {habits} habits",
        extra={"completions": completions},
    )
    return target_factory


__all__ = ["SYNC_ENABLED_KEY", "SyncSettings", "migrate_sync"]
