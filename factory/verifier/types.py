# FILE: factory/verifier/types.py
"""
Verifier contract

Shapes exchanged with static-analysis runners (a `go vet`-style checker is
one example). Runners consume post-apply Artifacts, never a Patch, and report
Issues. No runner is executed from this package.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional


class ArtifactType(str, Enum):
    SOURCE = "source"
    TEST = "test"
    CONFIG = "config"
    DOCUMENTATION = "documentation"
    SCHEMA = "schema"
    DEPLOYMENT = "deployment"
    BINARY = "binary"


class IssueType(str, Enum):
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    STYLE = "style"
    SECURITY = "security"
    PERFORMANCE = "performance"
    MAINTENANCE = "maintenance"
    COMPLIANCE = "compliance"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    BLOCKING = "blocking"


# Severities that fail a verification run
FAILING_SEVERITIES = (Severity.ERROR, Severity.CRITICAL, Severity.BLOCKING)

LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    ".py": "python",
    ".go": "go",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".rb": "ruby",
    ".php": "php",
    ".rs": "rust",
    ".cs": "csharp",
    ".sql": "sql",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".md": "markdown",
}

_CONFIG_EXTENSIONS = (".yaml", ".yml", ".json", ".toml", ".ini", ".env")


@dataclass
class Artifact:
    """A file (post-apply) handed to a runner."""
    path: str
    type: ArtifactType = ArtifactType.SOURCE
    language: str = ""
    framework: str = ""
    content: str = ""
    size: int = 0
    hash: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "type": self.type.value,
            "language": self.language,
            "framework": self.framework,
            "content": self.content,
            "size": self.size,
            "hash": self.hash,
            "metadata": dict(self.metadata),
        }


@dataclass
class Issue:
    """One finding reported by a runner."""
    id: str
    type: IssueType
    severity: Severity
    title: str
    description: str = ""
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    rule: str = ""

    @property
    def is_failing(self) -> bool:
        return self.severity in FAILING_SEVERITIES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "rule": self.rule,
        }


@dataclass
class RunnerResult:
    success: bool
    issues: List[Issue] = field(default_factory=list)
    duration_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "issues": [i.to_dict() for i in self.issues],
            "duration_ms": self.duration_ms,
        }


class Runner(ABC):
    """A pluggable verification tool."""

    name: str = ""
    version: str = ""

    @abstractmethod
    def can_run(self, artifacts: List[Artifact]) -> bool:
        ...

    @abstractmethod
    def run(self, artifacts: List[Artifact], config: Optional[Dict[str, Any]] = None) -> RunnerResult:
        ...


def detect_language(path: str) -> str:
    return LANGUAGE_BY_EXTENSION.get(PurePosixPath(path).suffix.lower(), "")


def _artifact_type(path: str) -> ArtifactType:
    p = PurePosixPath(path)
    name = p.name.lower()
    if name.startswith("test_") or name.endswith(("_test.go", ".test.ts", ".test.js", "_test.py")) or "tests" in p.parts:
        return ArtifactType.TEST
    if p.suffix.lower() == ".md":
        return ArtifactType.DOCUMENTATION
    if p.suffix.lower() in _CONFIG_EXTENSIONS:
        return ArtifactType.CONFIG
    return ArtifactType.SOURCE


def artifact_from_content(path: str, content: str, framework: str = "") -> Artifact:
    """Build an Artifact with language, type, size (bytes) and sha256 filled in."""
    raw = content.encode("utf-8")
    return Artifact(
        path=path,
        type=_artifact_type(path),
        language=detect_language(path),
        framework=framework,
        content=content,
        size=len(raw),
        hash=hashlib.sha256(raw).hexdigest(),
    )


def summarize_issues(issues: List[Issue]) -> Dict[str, int]:
    """Count issues per severity (every severity present, zero when absent)."""
    counts = {s.value: 0 for s in Severity}
    for issue in issues:
        counts[issue.severity.value] += 1
    return counts


__all__ = [
    "ArtifactType",
    "IssueType",
    "Severity",
    "FAILING_SEVERITIES",
    "Artifact",
    "Issue",
    "RunnerResult",
    "Runner",
    "detect_language",
    "artifact_from_content",
    "summarize_issues",
]
