# FILE: factory/overlays/__init__.py
"""Overlay bundles: YAML-defined domain/compliance extensions applied to an IR.

Built-in definitions live in definitions/ (fintech, healthcare, ecommerce,
pci, hipaa, gdpr). Extra directories come from FACTORY_OVERLAY_PATHS.
"""

from .errors import CircularDependencyError, OverlayError, OverlayNotFoundError
from .schemas import (
    ConflictInfo,
    IRModification,
    ModificationOp,
    OverlayMetadata,
    OverlaySpec,
    OverlayType,
    PromptEnhancement,
    ResolverResult,
    ValidationRule,
)
from .registry import OverlayRegistry
from .resolver import BUILTIN_OVERLAY_DIR, FileSystemResolver, apply_overlay, load_overlay_file

__all__ = [
    "CircularDependencyError",
    "OverlayError",
    "OverlayNotFoundError",
    "ConflictInfo",
    "IRModification",
    "ModificationOp",
    "OverlayMetadata",
    "OverlaySpec",
    "OverlayType",
    "PromptEnhancement",
    "ResolverResult",
    "ValidationRule",
    "OverlayRegistry",
    "BUILTIN_OVERLAY_DIR",
    "FileSystemResolver",
    "apply_overlay",
    "load_overlay_file",
]
