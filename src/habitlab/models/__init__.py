"""SQLModel table exports."""

from .habit import Completion, Habit
from .settings import AppSetting

__all__ = [
    "AppSetting",
    "Completion",
    "Habit",
]
