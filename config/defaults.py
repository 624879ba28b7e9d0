# FILE: config/defaults.py
"""Compiler defaults applied when a brief is silent about the stack."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config.settings import (
    DEFAULT_BACKEND_FRAMEWORK,
    DEFAULT_BACKEND_LANGUAGE,
    DEFAULT_DATABASE,
    Settings,
    get_settings,
)


@dataclass(frozen=True)
class CompilerDefaults:
    backend_language: str = DEFAULT_BACKEND_LANGUAGE
    backend_framework: str = DEFAULT_BACKEND_FRAMEWORK
    database: str = DEFAULT_DATABASE

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CompilerDefaults":
        settings = settings or get_settings()
        return cls(
            backend_language=settings.default_backend_language,
            backend_framework=settings.default_backend_framework,
            database=settings.default_database,
        )


__all__ = ["CompilerDefaults"]
