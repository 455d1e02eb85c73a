"""Configuration safeguards."""

from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

import habitlab.config as cfg


def test_defaults_live_in_data_dir(isolated_data_dir):
    config = cfg.BaseConfig()

    assert config.DATA_DIR == isolated_data_dir.resolve()
    assert config.DATA_DIR.is_dir()
    assert config.DATABASE_URL.endswith("habitlab.db")
    assert config.widget_snapshot_path == config.DATA_DIR / "widget-snapshot.json"
    assert config.TIMEZONE == ZoneInfo("UTC")
    assert config.SYNC_ENABLED_DEFAULT is False


def test_database_url_follows_sync_flag(monkeypatch):
    monkeypatch.setenv("HABITLAB_DATABASE_URL", "sqlite:///local.db")
    monkeypatch.setenv("HABITLAB_CLOUD_DATABASE_URL", "sqlite:///cloud.db")
    config = cfg.BaseConfig()

    assert config.database_url(sync_enabled=False) == "sqlite:///local.db"
    assert config.database_url(sync_enabled=True) == "sqlite:///cloud.db"


def test_unknown_time_zone_raises(monkeypatch):
    """A typo in the zone name should fail loudly rather than fall back."""

    monkeypatch.setenv("HABITLAB_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValueError):
        cfg.BaseConfig()


@pytest.mark.parametrize("raw, expected", [("1", True), ("Yes", True), (" on ", True), ("0", False), ("nope", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("HABITLAB_FLAG", raw)
    assert cfg._env_bool("HABITLAB_FLAG") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("HABITLAB_FLAG", raising=False)
    assert cfg._env_bool("HABITLAB_FLAG", default=True) is True


def test_engine_options_allow_cross_thread_sqlite():
    assert cfg.BaseConfig().sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}
