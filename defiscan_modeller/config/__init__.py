"""Modeller settings."""

from .settings import CACHE_PATH, DEFAULT_PROJECT_TITLE, LOG_LEVEL, STORAGE_KEYS

__all__ = [
    "CACHE_PATH",
    "DEFAULT_PROJECT_TITLE",
    "LOG_LEVEL",
    "STORAGE_KEYS",
]
