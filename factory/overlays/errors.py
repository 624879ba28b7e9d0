# FILE: factory/overlays/errors.py
class OverlayError(Exception):
    """Base class for overlay loading/resolution errors."""


class OverlayNotFoundError(OverlayError):
    pass


class CircularDependencyError(OverlayError):
    """Raised when overlay dependencies form a cycle."""
