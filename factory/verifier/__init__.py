# FILE: factory/verifier/__init__.py
"""Verifier contract: Artifact in, Issue list out."""

from .types import (
    Artifact,
    ArtifactType,
    Issue,
    IssueType,
    Runner,
    RunnerResult,
    Severity,
    artifact_from_content,
    summarize_issues,
)

__all__ = [
    "Artifact",
    "ArtifactType",
    "Issue",
    "IssueType",
    "Runner",
    "RunnerResult",
    "Severity",
    "artifact_from_content",
    "summarize_issues",
]
