# FILE: config/settings.py
"""Environment-driven settings for the factory front end.

All values come from FACTORY_* environment variables (a local .env file is
loaded first). Settings are read once and cached; call get_settings.cache_clear()
in tests after changing the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_ALLOWED_PATHS: Tuple[str, ...] = ("backend/", "frontend/", "api/")
DEFAULT_BACKEND_LANGUAGE = "python"
DEFAULT_BACKEND_FRAMEWORK = "fastapi"
DEFAULT_DATABASE = "postgresql"
DEFAULT_DATABASE_URL = "sqlite:///./data/factory.db"
DEFAULT_OVERLAY_CACHE_TTL = 300.0
DEFAULT_OVERLAY_CACHE_SIZE = 128


def _split_csv(raw: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    allowed_paths: Tuple[str, ...] = DEFAULT_ALLOWED_PATHS
    default_backend_language: str = DEFAULT_BACKEND_LANGUAGE
    default_backend_framework: str = DEFAULT_BACKEND_FRAMEWORK
    default_database: str = DEFAULT_DATABASE
    overlay_paths: Tuple[str, ...] = field(default_factory=tuple)
    database_url: str = DEFAULT_DATABASE_URL
    overlay_cache_ttl: float = DEFAULT_OVERLAY_CACHE_TTL
    overlay_cache_size: int = DEFAULT_OVERLAY_CACHE_SIZE


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings from the environment.

    FACTORY_ALLOWED_PATHS is a comma-separated prefix list. An explicitly empty
    value disables path locality (every path allowed).
    """
    raw_allowed = os.getenv("FACTORY_ALLOWED_PATHS")
    if raw_allowed is None:
        allowed = DEFAULT_ALLOWED_PATHS
    else:
        allowed = _split_csv(raw_allowed)

    return Settings(
        allowed_paths=allowed,
        default_backend_language=os.getenv(
            "FACTORY_DEFAULT_BACKEND_LANGUAGE", DEFAULT_BACKEND_LANGUAGE
        ).strip().lower(),
        default_backend_framework=os.getenv(
            "FACTORY_DEFAULT_BACKEND_FRAMEWORK", DEFAULT_BACKEND_FRAMEWORK
        ).strip().lower(),
        default_database=os.getenv("FACTORY_DEFAULT_DATABASE", DEFAULT_DATABASE).strip().lower(),
        overlay_paths=_split_csv(os.getenv("FACTORY_OVERLAY_PATHS", "")),
        database_url=os.getenv("FACTORY_DATABASE_URL", DEFAULT_DATABASE_URL),
        overlay_cache_ttl=float(os.getenv("FACTORY_OVERLAY_CACHE_TTL", DEFAULT_OVERLAY_CACHE_TTL)),
        overlay_cache_size=int(os.getenv("FACTORY_OVERLAY_CACHE_SIZE", DEFAULT_OVERLAY_CACHE_SIZE)),
    )


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_ALLOWED_PATHS",
    "DEFAULT_BACKEND_LANGUAGE",
    "DEFAULT_BACKEND_FRAMEWORK",
    "DEFAULT_DATABASE",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_OVERLAY_CACHE_TTL",
    "DEFAULT_OVERLAY_CACHE_SIZE",
]
