# FILE: factory/ir/compiler.py
"""
Specification Compiler

Deterministically compiles a free-text application brief into an IRSpec.

Flow:
    brief -> normalize -> per-section extractors -> questions
          -> confidence / completeness -> warnings -> overlay detection
          -> CompilationResult

Overlay split:
    confidence >= 0.8        -> required_overlays
    0.5 <= confidence < 0.8  -> suggested_overlays
    below 0.5                -> reported in overlay_detection only

The only hard failure is an empty (or whitespace-only) brief, which raises
EmptyBriefError. Everything else is reported through warnings.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from config.defaults import CompilerDefaults
from factory.ir import extractors
from factory.ir.errors import EmptyBriefError
from factory.ir.overlay_detector import AUTO_APPLY_CONFIDENCE, OverlayDetector, dedupe
from factory.ir.patterns import RuleSet, default_rule_set
from factory.ir.questions import generate_questions
from factory.ir.schema import CompilationResult, IRSpec, OverlayDetectionResult, SpecMetadata
from factory.ir.scoring import calculate_completeness, calculate_confidence, generate_warnings

logger = logging.getLogger(__name__)


SUGGEST_CONFIDENCE = 0.5


def normalize_overlay_names(names: Iterable[str]) -> List[str]:
    """Strip, lower-case, drop empties, dedupe (first-seen order)."""
    return dedupe([n.strip().lower() for n in names if n and n.strip()])


class SpecificationCompiler:
    """Brief -> IRSpec compiler. Stateless between calls."""

    def __init__(
        self,
        defaults: Optional[CompilerDefaults] = None,
        rules: Optional[RuleSet] = None,
        overlay_detector: Optional[OverlayDetector] = None,
    ):
        self.defaults = defaults or CompilerDefaults.from_settings()
        self.rules = rules or default_rule_set()
        self.overlay_detector = overlay_detector or OverlayDetector()

    def compile(self, brief: str) -> CompilationResult:
        if brief is None or not brief.strip():
            logger.warning("[ir.compiler] rejected empty brief")
            raise EmptyBriefError()

        normalized = extractors.normalize_brief(brief)
        rules = self.rules

        app = extractors.extract_app(normalized, rules, self.defaults)
        entities = extractors.extract_entities(normalized, rules)
        now = datetime.now(timezone.utc)

        spec = IRSpec(
            version="1.0",
            id=str(uuid.uuid4()),
            brief=brief,
            app=app,
            non_functionals=extractors.extract_non_functionals(normalized),
            api=extractors.extract_api(normalized, entities),
            data=extractors.extract_data(entities, rules),
            ui=extractors.extract_ui(app.type, entities),
            ops=extractors.extract_ops(),
            acceptance=extractors.extract_acceptance(),
            metadata=SpecMetadata(
                created_at=now,
                updated_at=now,
                version="1.0",
                source="ai",
                tags=extractors.extract_tags(normalized, rules),
            ),
        )

        questions = generate_questions(spec)
        spec.questions = questions
        spec.metadata.confidence = calculate_confidence(spec, normalized)
        spec.metadata.completeness = calculate_completeness(spec)

        warnings = generate_warnings(spec)

        detection = self.overlay_detector.detect_overlays(brief)
        required: List[str] = []
        suggested: List[str] = []
        for suggestion in detection.suggestions:
            if suggestion.confidence >= AUTO_APPLY_CONFIDENCE:
                required.append(suggestion.name)
            elif suggestion.confidence >= SUGGEST_CONFIDENCE:
                suggested.append(suggestion.name)

        required = dedupe(required)
        suggested = [s for s in dedupe(suggested) if s not in required]
        warnings.extend(detection.warnings)

        logger.info(
            "[ir.compiler] compiled app=%r type=%s domain=%s entities=%d confidence=%.2f required=%s",
            spec.app.name,
            spec.app.type,
            spec.app.domain,
            len(spec.data.entities),
            spec.metadata.confidence,
            required,
        )

        return CompilationResult(
            spec=spec,
            questions=questions,
            warnings=warnings,
            confidence=spec.metadata.confidence,
            overlay_detection=detection,
            suggested_overlays=suggested,
            required_overlays=required,
        )

    def compile_with_overlays(self, brief: str, overlays: Iterable[str]) -> CompilationResult:
        """Compile, then promote caller-supplied overlays to required."""
        result = self.compile(brief)
        explicit = normalize_overlay_names(overlays)

        result.warnings.extend(
            self.overlay_detector.validate_overlay_compatibility(explicit, result.spec)
        )
        result.required_overlays = dedupe(result.required_overlays + explicit)
        result.suggested_overlays = [
            s for s in result.suggested_overlays if s not in result.required_overlays
        ]

        logger.info("[ir.compiler] explicit overlays=%s required=%s", explicit, result.required_overlays)
        return result

    def suggest_overlays(self, brief: str) -> OverlayDetectionResult:
        """Overlay detection only, no full compilation."""
        return self.overlay_detector.detect_overlays(brief)


__all__ = [
    "SpecificationCompiler",
    "normalize_overlay_names",
    "SUGGEST_CONFIDENCE",
]
