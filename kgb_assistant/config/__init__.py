"""Configuration package."""

from kgb_assistant.config.settings import (
    AppSettings,
    GeminiSettings,
    ImportStrategyName,
    KGBSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "ImportStrategyName",
    "KGBSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
