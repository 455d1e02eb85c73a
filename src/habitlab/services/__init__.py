"""Habit tracking services."""
