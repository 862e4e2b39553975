"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import (
    DEFAULT_CACHE_PATH,
    DEFAULT_IMAGE,
    AppSettings,
    LoggingSettings,
    MetricsSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "DEFAULT_CACHE_PATH",
    "DEFAULT_IMAGE",
    "AppSettings",
    "LoggingSettings",
    "MetricsSettings",
    "get_settings",
    "load_settings",
]
