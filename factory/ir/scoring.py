# FILE: factory/ir/scoring.py
"""
Confidence, completeness and warnings for a compiled IRSpec.

Confidence (clamped to [0, 1], rounded to 2 decimals):
    base 0.5
    +0.10  more than 2 features
    +0.10  domain is not "general"
    +0.15  at least one entity
    +0.10  more than 5 endpoints
    -0.20  normalized brief shorter than 50 characters

Completeness: weighted checklist over a fixed total weight of 10.
"""

from __future__ import annotations

from typing import List, Tuple

from factory.ir.patterns import DEFAULT_DOMAIN, PLACEHOLDER_APP_NAME
from factory.ir.schema import IRSpec


__all__ = [
    "calculate_confidence",
    "calculate_completeness",
    "generate_warnings",
    "clamp",
    "LOW_CONFIDENCE_THRESHOLD",
    "SHORT_BRIEF_LENGTH",
    "WARN_LOW_CONFIDENCE",
    "WARN_NO_ENTITIES",
    "WARN_NO_SPECIFIC_FEATURES",
    "WARN_GENERIC_DOMAIN",
]


BASE_CONFIDENCE = 0.5
LOW_CONFIDENCE_THRESHOLD = 0.6
SHORT_BRIEF_LENGTH = 50
COMPLETENESS_TOTAL_WEIGHT = 10.0

WARN_LOW_CONFIDENCE = "Low confidence in specification accuracy - consider providing more details"
WARN_NO_ENTITIES = "No data entities identified - may need to define data model manually"
WARN_NO_SPECIFIC_FEATURES = "No specific features identified - using default CRUD operations"
WARN_GENERIC_DOMAIN = "Generic domain detected - consider specifying industry for better defaults"


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def calculate_confidence(spec: IRSpec, normalized_brief: str) -> float:
    confidence = BASE_CONFIDENCE

    if len(spec.app.features) > 2:
        confidence += 0.1
    if spec.app.domain != DEFAULT_DOMAIN:
        confidence += 0.1
    if spec.data.entities:
        confidence += 0.15
    if len(spec.api.endpoints) > 5:
        confidence += 0.1

    if len(normalized_brief) < SHORT_BRIEF_LENGTH:
        confidence -= 0.2

    return round(clamp(confidence), 2)


def _completeness_checks(spec: IRSpec) -> List[Tuple[bool, float]]:
    return [
        (bool(spec.app.name) and spec.app.name != PLACEHOLDER_APP_NAME, 1.0),
        (bool(spec.app.features), 1.0),
        (bool(spec.data.entities), 1.5),
        (bool(spec.api.endpoints), 1.5),
        (bool(spec.app.stack.backend.language), 1.0),
        (bool(spec.app.stack.database.type), 1.0),
        (bool(spec.non_functionals.security.authentication), 1.0),
        (bool(spec.ops.environment), 1.0),
        (bool(spec.acceptance), 1.0),
    ]


def calculate_completeness(spec: IRSpec) -> float:
    score = sum(weight for passed, weight in _completeness_checks(spec) if passed)
    return round(clamp(score / COMPLETENESS_TOTAL_WEIGHT), 2)


def generate_warnings(spec: IRSpec) -> List[str]:
    """Independent checks, appended in a fixed order."""
    warnings: List[str] = []

    if spec.metadata.confidence < LOW_CONFIDENCE_THRESHOLD:
        warnings.append(WARN_LOW_CONFIDENCE)

    if not spec.data.entities:
        warnings.append(WARN_NO_ENTITIES)

    # CRUD-only counts as no specific features
    if not any(f.type != "crud" for f in spec.app.features):
        warnings.append(WARN_NO_SPECIFIC_FEATURES)

    if spec.app.domain == DEFAULT_DOMAIN:
        warnings.append(WARN_GENERIC_DOMAIN)

    return warnings
