# FILE: factory/storage/errors.py
"""Persistence errors."""


class StorageError(Exception):
    pass


class RecordNotFoundError(StorageError):
    pass


class PatchNotApplicableError(StorageError):
    """Raised when an invalid patch is marked as applied."""
    pass


__all__ = ["StorageError", "RecordNotFoundError", "PatchNotApplicableError"]
