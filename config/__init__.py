"""
Configuration Management Module
Engine settings loaded from the environment.
"""
from .settings import (
    EngineSettings,
    build_settings,
    get_settings,
)

__all__ = [
    "EngineSettings",
    "build_settings",
    "get_settings",
]
