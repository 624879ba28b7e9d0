# FILE: factory/ir/questions.py
"""
Clarification Questions for the IR compiler

Emits ambiguity prompts for genuine unknowns only:
- domain-001     when the domain fell back to "general"
- compliance-001 when no compliance standard was detected

Every question is non-blocking (required=False); compilation never waits on
an answer.

Used by:
- compiler.py after all sections are extracted
"""

from __future__ import annotations

from typing import List

from factory.ir.patterns import DEFAULT_DOMAIN
from factory.ir.schema import BlockingQuestion, IRSpec


__all__ = [
    "generate_questions",
    "DOMAIN_QUESTION_ID",
    "COMPLIANCE_QUESTION_ID",
]


DOMAIN_QUESTION_ID = "domain-001"
COMPLIANCE_QUESTION_ID = "compliance-001"


def generate_questions(spec: IRSpec) -> List[BlockingQuestion]:
    questions: List[BlockingQuestion] = []

    if spec.app.domain == DEFAULT_DOMAIN:
        questions.append(BlockingQuestion(
            id=DOMAIN_QUESTION_ID,
            question="What is the primary domain or industry for this application?",
            context="This helps determine appropriate features and compliance requirements",
            type="business",
            options=["ecommerce", "fintech", "healthcare", "education", "social", "business"],
            required=False,
        ))

    if not spec.non_functionals.security.compliance:
        questions.append(BlockingQuestion(
            id=COMPLIANCE_QUESTION_ID,
            question="Are there any specific compliance requirements (GDPR, HIPAA, PCI, etc.)?",
            context="This affects data handling, security measures, and audit requirements",
            type="security",
            options=["none", "gdpr", "hipaa", "pci-dss", "sox"],
            required=False,
        ))

    return questions
