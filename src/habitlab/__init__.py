"""HabitLab habit tracking package."""

from __future__ import annotations

from .config import BaseConfig

__all__ = ["BaseConfig"]
