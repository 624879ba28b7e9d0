# FILE: factory/ir/__init__.py
"""IR (Intermediate Representation) package.

Delivers:
- IR schema (Pydantic)
- Rule tables + per-section extractors
- Overlay detection (domain / compliance)
- SpecificationCompiler (brief -> CompilationResult)
- Canonical JSON + sha256 hashing of compiled specs
"""

from .errors import CompilerError, EmptyBriefError
from .schema import (
    CompilationResult,
    Entity,
    IRSpec,
    OverlayDetectionResult,
    OverlaySuggestion,
)
from .patterns import RuleSet, default_rule_set
from .overlay_detector import OverlayDetector
from .compiler import SpecificationCompiler, normalize_overlay_names
from .canonical import compute_ir_hash, verify_hash

__all__ = [
    "CompilerError",
    "EmptyBriefError",
    "CompilationResult",
    "Entity",
    "IRSpec",
    "OverlayDetectionResult",
    "OverlaySuggestion",
    "RuleSet",
    "default_rule_set",
    "OverlayDetector",
    "SpecificationCompiler",
    "normalize_overlay_names",
    "compute_ir_hash",
    "verify_hash",
]
