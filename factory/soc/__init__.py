# FILE: factory/soc/__init__.py
"""Strict Output Contract (SOC) package.

Re-validates a code-generation model's raw patch text before any file may
change: grammar, path locality, prose/refusal detection, diff syntax.
"""

from .errors import SOCError, PatchValidationError
from .grammar import is_path_allowed, is_refusal, validate_input
from .parser import ParserState, Patch, SOCParser, Step, transition

__all__ = [
    "SOCError",
    "PatchValidationError",
    "is_path_allowed",
    "is_refusal",
    "validate_input",
    "ParserState",
    "Patch",
    "SOCParser",
    "Step",
    "transition",
]
