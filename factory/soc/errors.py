# FILE: factory/soc/errors.py
from typing import List, Optional


class SOCError(Exception):
    """Base class for Strict Output Contract errors."""


class PatchValidationError(SOCError):
    """Raised by Patch.raise_for_validity() for a patch that must not be applied."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])
