# FILE: factory/ir/overlay_detector.py
"""
Overlay Detection

Keyword-and-confidence classifier that recommends domain overlays
(fintech, healthcare, ecommerce) and compliance overlays (pci, hipaa, gdpr)
for a brief.

Scoring:
- Domain:     0.3 per keyword hit, +0.3 if >= 2 distinct keywords,
              +0.2 for the domain's secondary signal, capped at 1.0
- Compliance: 0.4 per keyword hit, forced to 0.9 when a hit names the
              standard itself ("hipaa", "pci-dss" ...), capped at 1.0
- Suggestions under 0.3 are dropped; >= 0.8 are auto-applied.

Patterns are compiled once in __init__ and only read afterwards, so one
detector can serve concurrent callers.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

from factory.ir.patterns import (
    COMPLIANCE_OVERLAY_PATTERNS,
    COMPLIANCE_REASONS,
    DOMAIN_OVERLAY_PATTERNS,
    DOMAIN_REASONS,
    DOMAIN_SECONDARY_SIGNALS,
)
from factory.ir.schema import IRSpec, OverlayDetectionResult, OverlaySuggestion

logger = logging.getLogger(__name__)


MIN_CONFIDENCE = 0.3
AUTO_APPLY_CONFIDENCE = 0.8

DOMAIN_KEYWORD_WEIGHT = 0.3
DOMAIN_DISTINCT_BONUS = 0.3
DOMAIN_SECONDARY_BONUS = 0.2
COMPLIANCE_KEYWORD_WEIGHT = 0.4
COMPLIANCE_EXPLICIT_CONFIDENCE = 0.9

WARN_MULTIPLE_COMPLIANCE = "Multiple compliance overlays detected - verify requirements are compatible"
WARN_COMPLIANCE_WITHOUT_DOMAIN = (
    "Compliance overlay detected without domain context - consider adding relevant domain overlay"
)
WARN_HEALTHCARE_FINTECH = "Healthcare and fintech overlays both applied - ensure proper data separation"
WARN_GDPR_JAVASCRIPT = "GDPR compliance in JavaScript requires careful handling of data types"

# Backend languages treated as JavaScript for the GDPR data-type advisory.
JAVASCRIPT_LANGUAGES = ("javascript", "nodejs")


def dedupe(items: Sequence[str]) -> List[str]:
    """Drop repeats, keep first-seen order."""
    seen = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _compile(table: Sequence[Tuple[str, str]]) -> Tuple[Tuple[str, Pattern[str]], ...]:
    return tuple((name, re.compile(pattern, re.IGNORECASE)) for name, pattern in table)


class OverlayDetector:
    """Suggests overlays for a brief. Tables are injectable for tests."""

    def __init__(
        self,
        domain_patterns: Optional[Sequence[Tuple[str, str]]] = None,
        compliance_patterns: Optional[Sequence[Tuple[str, str]]] = None,
        secondary_signals: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._domain_patterns = _compile(
            DOMAIN_OVERLAY_PATTERNS if domain_patterns is None else domain_patterns
        )
        self._compliance_patterns = _compile(
            COMPLIANCE_OVERLAY_PATTERNS if compliance_patterns is None else compliance_patterns
        )
        self._secondary_signals: Dict[str, Tuple[str, ...]] = {
            k: tuple(v)
            for k, v in (DOMAIN_SECONDARY_SIGNALS if secondary_signals is None else secondary_signals).items()
        }

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    def detect_overlays(self, brief: str) -> OverlayDetectionResult:
        text = brief.lower()

        suggestions = self._detect_domains(text) + self._detect_compliance(text)
        auto_apply = dedupe([s.name for s in suggestions if s.confidence >= AUTO_APPLY_CONFIDENCE])
        warnings = self._check_for_warnings(suggestions)

        logger.debug(
            "[overlay_detector] suggestions=%s auto_apply=%s",
            [(s.name, s.confidence) for s in suggestions],
            auto_apply,
        )
        return OverlayDetectionResult(suggestions=suggestions, auto_apply=auto_apply, warnings=warnings)

    def _detect_domains(self, text: str) -> List[OverlaySuggestion]:
        out: List[OverlaySuggestion] = []
        for name, pattern in self._domain_patterns:
            matches = [m.group(0) for m in pattern.finditer(text)]
            if not matches:
                continue
            confidence = self._domain_confidence(name, matches, text)
            if confidence < MIN_CONFIDENCE:
                continue
            keywords = dedupe(matches)
            reason = DOMAIN_REASONS.get(name, "Detected " + name + " keywords: {keywords}")
            out.append(OverlaySuggestion(
                name=name,
                type="domain",
                confidence=confidence,
                reason=reason.format(keywords=", ".join(keywords)),
                keywords=keywords,
            ))
        return out

    def _detect_compliance(self, text: str) -> List[OverlaySuggestion]:
        out: List[OverlaySuggestion] = []
        for name, pattern in self._compliance_patterns:
            matches = [m.group(0) for m in pattern.finditer(text)]
            if not matches:
                continue
            confidence = self._compliance_confidence(name, matches)
            if confidence < MIN_CONFIDENCE:
                continue
            keywords = dedupe(matches)
            reason = COMPLIANCE_REASONS.get(name, "Detected " + name + " compliance keywords: {keywords}")
            out.append(OverlaySuggestion(
                name=name,
                type="compliance",
                confidence=confidence,
                reason=reason.format(keywords=", ".join(keywords)),
                keywords=keywords,
            ))
        return out

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def _domain_confidence(self, name: str, matches: List[str], text: str) -> float:
        confidence = DOMAIN_KEYWORD_WEIGHT * len(matches)
        if len(set(matches)) > 1:
            confidence += DOMAIN_DISTINCT_BONUS
        if any(signal in text for signal in self._secondary_signals.get(name, ())):
            confidence += DOMAIN_SECONDARY_BONUS
        return round(min(confidence, 1.0), 2)

    @staticmethod
    def _compliance_confidence(name: str, matches: List[str]) -> float:
        confidence = COMPLIANCE_KEYWORD_WEIGHT * len(matches)
        if any(name in m for m in matches):
            confidence = COMPLIANCE_EXPLICIT_CONFIDENCE
        return round(min(confidence, 1.0), 2)

    @staticmethod
    def _check_for_warnings(suggestions: List[OverlaySuggestion]) -> List[str]:
        warnings: List[str] = []

        strong_compliance = [s for s in suggestions if s.type == "compliance" and s.confidence > 0.6]
        has_domain = any(s.type == "domain" and s.confidence > 0.5 for s in suggestions)

        if len(strong_compliance) > 2:
            warnings.append(WARN_MULTIPLE_COMPLIANCE)
        if strong_compliance and not has_domain:
            warnings.append(WARN_COMPLIANCE_WITHOUT_DOMAIN)
        return warnings

    # -------------------------------------------------------------------------
    # Compatibility (advisory, caller-supplied overlays only)
    # -------------------------------------------------------------------------

    def validate_overlay_compatibility(self, overlays: Sequence[str], spec: Optional[IRSpec]) -> List[str]:
        """Advisory warnings for an explicit overlay set. Never raises."""
        names = {o.strip().lower() for o in overlays}
        warnings: List[str] = []

        if "healthcare" in names and "fintech" in names:
            warnings.append(WARN_HEALTHCARE_FINTECH)

        if spec is not None and "gdpr" in names:
            language = spec.app.stack.backend.language
            if language in JAVASCRIPT_LANGUAGES:
                warnings.append(WARN_GDPR_JAVASCRIPT)

        if warnings:
            logger.info("[overlay_detector] compatibility warnings for %s: %s", sorted(names), warnings)
        return warnings


__all__ = [
    "OverlayDetector",
    "dedupe",
    "MIN_CONFIDENCE",
    "AUTO_APPLY_CONFIDENCE",
    "WARN_MULTIPLE_COMPLIANCE",
    "WARN_COMPLIANCE_WITHOUT_DOMAIN",
    "WARN_HEALTHCARE_FINTECH",
    "WARN_GDPR_JAVASCRIPT",
]
