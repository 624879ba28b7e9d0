# FILE: config/__init__.py
"""Configuration package for the factory front end.

Contains:
- settings.py: FACTORY_* environment settings
- defaults.py: CompilerDefaults (stack fallbacks for the IR compiler)
"""

from config.settings import Settings, get_settings
from config.defaults import CompilerDefaults

__all__ = [
    "Settings",
    "get_settings",
    "CompilerDefaults",
]
