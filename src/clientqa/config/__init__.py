"""Application configuration."""

from .settings import (
    ApplicationSettings,
    AssistantConfig,
    DatabaseSettings,
    ModelSettings,
    TelemetrySettings,
    settings,
)

__all__ = [
    "ApplicationSettings",
    "AssistantConfig",
    "DatabaseSettings",
    "ModelSettings",
    "TelemetrySettings",
    "settings",
]
