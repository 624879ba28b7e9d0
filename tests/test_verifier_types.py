# FILE: tests/test_verifier_types.py
"""Tests for the verifier contract types (factory/verifier/types.py)."""

import hashlib

import pytest

from factory.verifier.types import (
    Artifact,
    ArtifactType,
    Issue,
    IssueType,
    Runner,
    RunnerResult,
    Severity,
    artifact_from_content,
    detect_language,
    summarize_issues,
)


class _LineLengthRunner(Runner):
    """Toy runner: flags lines over 20 characters."""

    name = "line-length"
    version = "0.1"

    def can_run(self, artifacts):
        return any(a.language == "python" for a in artifacts)

    def run(self, artifacts, config=None):
        limit = (config or {}).get("limit", 20)
        issues = []
        for a in artifacts:
            for i, line in enumerate(a.content.split("\n"), start=1):
                if len(line) > limit:
                    issues.append(Issue(
                        id=f"{a.path}:{i}",
                        type=IssueType.STYLE,
                        severity=Severity.WARNING,
                        title="line too long",
                        file=a.path,
                        line=i,
                        rule="E501",
                    ))
        return RunnerResult(success=not any(i.is_failing for i in issues), issues=issues)


class TestArtifacts:
    def test_from_content(self):
        content = "print('héllo')\n"
        a = artifact_from_content("backend/app.py", content, framework="fastapi")
        assert a.language == "python"
        assert a.type is ArtifactType.SOURCE
        assert a.framework == "fastapi"
        assert a.size == len(content.encode("utf-8"))
        assert a.hash == hashlib.sha256(content.encode("utf-8")).hexdigest()

    @pytest.mark.parametrize("path,expected", [
        ("backend/tests/test_users.py", ArtifactType.TEST),
        ("backend/handlers_test.go", ArtifactType.TEST),
        ("frontend/src/App.test.ts", ArtifactType.TEST),
        ("README.md", ArtifactType.DOCUMENTATION),
        ("deploy/values.yaml", ArtifactType.CONFIG),
        ("backend/main.go", ArtifactType.SOURCE),
    ])
    def test_type_detection(self, path, expected):
        assert artifact_from_content(path, "").type is expected

    @pytest.mark.parametrize("path,expected", [
        ("a.py", "python"),
        ("a.GO", "go"),
        ("a.tsx", "typescript"),
        ("Makefile", ""),
    ])
    def test_detect_language(self, path, expected):
        assert detect_language(path) == expected

    def test_to_dict(self):
        d = Artifact(path="x.py", type=ArtifactType.CONFIG).to_dict()
        assert d["type"] == "config"
        assert d["metadata"] == {}


class TestIssues:
    @pytest.mark.parametrize("severity,failing", [
        (Severity.INFO, False),
        (Severity.WARNING, False),
        (Severity.ERROR, True),
        (Severity.CRITICAL, True),
        (Severity.BLOCKING, True),
    ])
    def test_is_failing(self, severity, failing):
        issue = Issue(id="1", type=IssueType.SEMANTIC, severity=severity, title="t")
        assert issue.is_failing is failing

    def test_summary_has_every_severity(self):
        issues = [
            Issue(id="1", type=IssueType.SYNTAX, severity=Severity.ERROR, title="a"),
            Issue(id="2", type=IssueType.STYLE, severity=Severity.WARNING, title="b"),
            Issue(id="3", type=IssueType.STYLE, severity=Severity.WARNING, title="c"),
        ]
        assert summarize_issues(issues) == {
            "info": 0,
            "warning": 2,
            "error": 1,
            "critical": 0,
            "blocking": 0,
        }


class TestRunnerContract:
    def test_abstract(self):
        with pytest.raises(TypeError):
            Runner()

    def test_toy_runner(self):
        runner = _LineLengthRunner()
        artifacts = [artifact_from_content("backend/app.py", "x = 1\nvery_long_name = 'a' * 100\n")]
        assert runner.can_run(artifacts)
        result = runner.run(artifacts)
        assert result.success is True
        assert [i.line for i in result.issues] == [2]
        assert result.to_dict()["issues"][0]["severity"] == "warning"

    def test_cannot_run_other_languages(self):
        assert not _LineLengthRunner().can_run([artifact_from_content("main.go", "")])
