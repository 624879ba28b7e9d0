# FILE: tests/test_soc_parser.py
"""Tests for the Strict Output Contract parser (factory/soc)."""

import dataclasses

import pytest

from factory.soc.errors import PatchValidationError
from factory.soc.grammar import (
    harvest_file_refs,
    is_path_allowed,
    is_prose,
    is_refusal,
    validate_diff,
    validate_input,
)
from factory.soc.parser import ParserState, Patch, SOCParser, transition

VALID_PATCH = (
    "### FACTORY/1 PATCH\n"
    "- file: backend/api/users.py\n"
    "- file: backend/models/user.py\n"
    "```diff\n"
    "--- a/backend/api/users.py\n"
    "+++ b/backend/api/users.py\n"
    "@@ -0,0 +1,10 @@\n"
    "+from fastapi import APIRouter\n"
    "+\n"
    "+router = APIRouter()\n"
    "+\n"
    "+@router.get(\"/users\")\n"
    "+async def get_users():\n"
    "+    return {\"users\": []}\n"
    "```\n"
    "### END"
)


class TestValidPatch:
    def test_parses(self, parser):
        patch = parser.parse(VALID_PATCH)
        assert patch.valid is True
        assert patch.errors == ()
        assert patch.files == ("backend/api/users.py", "backend/models/user.py")
        assert "from fastapi import APIRouter" in patch.content

    def test_content_excludes_fences(self, parser):
        patch = parser.parse(VALID_PATCH)
        assert "```" not in patch.content
        assert patch.content.startswith("--- a/backend/api/users.py")

    def test_indentation_preserved(self, parser):
        text = (
            "### FACTORY/1 PATCH\n"
            "- file: backend/app.py\n"
            "```diff\n"
            "--- a/backend/app.py\n"
            "+++ b/backend/app.py\n"
            "@@ -1,2 +1,3 @@\n"
            " def existing():\n"
            "     pass\n"
            "+x = 1\n"
            "```\n"
            "### END"
        )
        patch = parser.parse(text)
        assert patch.valid is True
        assert "\n def existing():\n     pass\n" in patch.content

    def test_surrounding_whitespace_ignored(self, parser):
        assert parser.parse("\n\n  " + VALID_PATCH + "  \n\n").valid is True

    def test_crlf_line_endings(self, parser):
        assert parser.parse(VALID_PATCH.replace("\n", "\r\n")).valid is True

    def test_to_dict(self, parser):
        d = parser.parse(VALID_PATCH).to_dict()
        assert set(d) == {"files", "content", "valid", "errors"}
        assert d["valid"] is True

    def test_multiple_files(self):
        text = (
            "### FACTORY/1 PATCH\n"
            "- file: src/api/users.go\n"
            "- file: src/models/user.go\n"
            "- file: src/handlers/auth.go\n"
            "```diff\n"
            "--- a/src/api/users.go\n"
            "+++ b/src/api/users.go\n"
            "@@ -0,0 +1,3 @@\n"
            "+package api\n"
            "+\n"
            "+func GetUsers() []User { return nil }\n"
            "--- a/src/models/user.go\n"
            "+++ b/src/models/user.go\n"
            "@@ -0,0 +1,2 @@\n"
            "+package models\n"
            "+type User struct{}\n"
            "--- a/src/handlers/auth.go\n"
            "+++ b/src/handlers/auth.go\n"
            "@@ -0,0 +1,1 @@\n"
            "+package handlers\n"
            "```\n"
            "### END"
        )
        patch = SOCParser(["src/"]).parse(text)
        assert patch.valid is True
        assert patch.files == ("src/api/users.go", "src/models/user.go", "src/handlers/auth.go")


class TestMalformedPatches:
    @pytest.mark.parametrize("text,expected_error", [
        (
            "- file: backend/test.py\n```diff\n+def test():\n+    pass\n```\n### END",
            "invalid header at line 1",
        ),
        (
            "### FACTORY/1 PATCH\n- file: backend/test.py\n```diff\n+def test():\n+    pass\n```",
            "incomplete patch, ended in state: expecting_trailer",
        ),
        (
            "### FACTORY/1 PATCH\n```diff\n+def test():\n+    pass\n```\n### END",
            "no files specified",
        ),
        (
            "### FACTORY/1 PATCH\n- file: backend/test.py\n```diff\n+def test():\n+    pass\n### END",
            "unclosed diff block",
        ),
        (
            "### FACTORY/1 PATCH\n- file: backend/test.py\n```diff\n```\n### END",
            "empty diff content",
        ),
        (
            "### FACTORY/1 PATCH\n- file: ../../../etc/passwd\n```diff\n+malicious content\n```\n### END",
            "file path not allowed: ../../../etc/passwd",
        ),
    ])
    def test_rejected(self, parser, text, expected_error):
        patch = parser.parse(text)
        assert patch.valid is False
        assert any(expected_error in e for e in patch.errors), patch.errors

    def test_header_error_stops_parsing(self, parser):
        patch = parser.parse("hello\n### FACTORY/1 PATCH\n- file: backend/a.py")
        assert patch.errors == ("invalid header at line 1, expected '### FACTORY/1 PATCH'",)
        assert patch.files == ()

    def test_all_errors_collected(self, parser):
        text = "### FACTORY/1 PATCH\n- file: kernel/x.go\n```diff\nnot a diff line\n"
        patch = parser.parse(text)
        joined = " | ".join(patch.errors)
        assert "file path not allowed: kernel/x.go" in joined
        assert "incomplete patch" in joined
        assert "unclosed diff block" in joined
        assert "invalid diff: invalid diff line: not a diff line" in joined

    def test_junk_before_trailer(self, parser):
        text = "### FACTORY/1 PATCH\n- file: backend/a.py\n```diff\n+x\n```\noops\n### END"
        patch = parser.parse(text)
        assert patch.valid is False
        assert "expected trailer '### END' at line 6" in patch.errors

    def test_junk_in_file_list(self, parser):
        text = "### FACTORY/1 PATCH\n- file: backend/a.py\nsome words\n```diff\n+x\n```\n### END"
        patch = parser.parse(text)
        assert "expected file list or diff start at line 3" in patch.errors


class TestProse:
    def test_prose_contamination(self):
        text = (
            "### FACTORY/1 PATCH\n"
            "Sure! I'll help you create a user management system. Here's the code:\n"
            "- file: backend/api/users.py\n"
            "```diff\n"
            "+# Let me add a simple user endpoint\n"
            "+def get_users():\n"
            "+    return []\n"
            "```\n"
            "### END"
        )
        patch = SOCParser(["backend/"]).parse(text)
        assert patch.valid is False
        assert any(e.startswith("prose detected at line 2") for e in patch.errors)

    @pytest.mark.parametrize("line", [
        "Here's the patch",
        "  let me explain",
        "Certainly, here it is",
        "Sorry. That failed",
    ])
    def test_is_prose(self, line):
        assert is_prose(line)

    @pytest.mark.parametrize("line", ["+here's a string", "- file: a.py", "@@ -1 +1 @@"])
    def test_not_prose(self, line):
        assert not is_prose(line)

    def test_context_line_inside_diff_is_scanned(self):
        text = (
            "### FACTORY/1 PATCH\n"
            "- file: backend/notes.py\n"
            "```diff\n"
            "--- a/backend/notes.py\n"
            "+++ b/backend/notes.py\n"
            "@@ -1,2 +1,2 @@\n"
            " Let me know\n"
            "+done = True\n"
            "```\n"
            "### END"
        )
        patch = SOCParser(["backend/"]).parse(text)
        assert patch.valid is False
        assert patch.errors == ("prose detected at line 7: Let me know",)


class TestEmptyInput:
    @pytest.mark.parametrize("text", ["", "   ", "\n\n\n", "\t\t"])
    def test_empty(self, parser, text):
        patch = parser.parse(text)
        assert patch.valid is False
        assert patch.errors == ("empty input",)


class TestRawDiffMode:
    def test_unfenced_diff_harvests_files(self, parser):
        text = (
            "### FACTORY/1 PATCH\n"
            "- file: backend/a.py\n"
            "--- a/backend/b.py\n"
            "+++ b/backend/b.py\n"
            "@@ -1 +1 @@\n"
            "-x = 1\n"
            "+x = 2\n"
            "### END"
        )
        patch = parser.parse(text)
        assert patch.valid is True
        assert patch.files == ("backend/a.py", "backend/b.py")
        assert patch.content.startswith("--- a/backend/b.py")

    def test_harvested_paths_are_checked(self, parser):
        text = (
            "### FACTORY/1 PATCH\n"
            "--- a/etc/passwd\n"
            "+++ b/etc/passwd\n"
            "+root::0:0\n"
            "### END"
        )
        patch = parser.parse(text)
        assert patch.valid is False
        assert "file path not allowed: etc/passwd" in patch.errors

    def test_raw_code_after_header_tolerated(self, parser):
        text = (
            "### FACTORY/1 PATCH\n"
            "--- a/backend/c.py\n"
            "+++ b/backend/c.py\n"
            "print('no prefix')\n"
            "### END"
        )
        assert parser.parse(text).valid is True


class TestPathLocality:
    @pytest.mark.parametrize("path", [
        "../../../etc/passwd",
        "/etc/hosts",
        "../sensitive/file.txt",
        "kernel/core/system.go",
        "config/secrets.yaml",
    ])
    def test_disallowed(self, path):
        assert not SOCParser(["backend/", "frontend/"]).is_path_allowed(path)

    @pytest.mark.parametrize("path", [
        "backend/api/users.py",
        "frontend/components/UserList.tsx",
        "frontend/pages/dashboard.tsx",
    ])
    def test_allowed(self, path):
        assert SOCParser(["backend/", "frontend/"]).is_path_allowed(path)

    def test_no_policy_allows_everything(self):
        assert is_path_allowed("anything/at/all.txt", [])
        assert SOCParser().parse(VALID_PATCH.replace("backend/", "lib/")).valid is True

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("FACTORY_ALLOWED_PATHS", "src/,pkg/")
        assert SOCParser.from_settings().allowed_paths == ("src/", "pkg/")


class TestDiffValidation:
    @pytest.mark.parametrize("diff", [
        "--- a/file.py\n+++ b/file.py\n@@ -1,3 +1,4 @@\n def existing():\n     pass\n+\n+def new_function():\n+    return True",
        "+def new_function():\n+    return \"hello\"",
        "-old_line = True\n+new_line = False",
    ])
    def test_valid(self, diff):
        assert validate_diff(diff) is None

    def test_invalid_text(self):
        assert validate_diff("This is not a diff at all") == "invalid diff line: This is not a diff at all"

    def test_empty(self):
        assert validate_diff("") == "no valid diff lines found"


class TestValidateInput:
    @pytest.mark.parametrize("text", [
        "I cannot help you with this request.",
        "I'm unable to create that code for you.",
        "I can't assist with generating malicious code.",
        "I'm not able to provide that functionality.",
        "I don't have the ability to create such code.",
        "I'm sorry, but I can't help with that.",
    ])
    def test_refusals(self, text):
        assert is_refusal(text)
        assert validate_input(text) == (False, "refusal detected in input")

    def test_ok(self):
        assert validate_input(VALID_PATCH) == (True, None)

    def test_missing_header(self):
        assert validate_input("- file: a.py\n### END") == (False, "missing required header")

    def test_missing_trailer(self):
        assert validate_input("### FACTORY/1 PATCH\n- file: a.py") == (False, "missing required trailer")

    def test_empty(self):
        assert validate_input("  ") == (False, "empty input")


class TestTransition:
    def test_header(self):
        step = transition(ParserState.EXPECTING_HEADER, "### FACTORY/1 PATCH", 1)
        assert step.next_state is ParserState.EXPECTING_FILES
        assert step.error is None

    def test_blank_lines_before_header(self):
        assert transition(ParserState.EXPECTING_HEADER, "", 1).next_state is ParserState.EXPECTING_HEADER

    def test_file_line(self):
        step = transition(ParserState.EXPECTING_FILES, "- file: backend/x.py", 2)
        assert step.file == "backend/x.py"
        assert step.next_state is ParserState.EXPECTING_FILES

    def test_fence_open_and_close(self):
        opened = transition(ParserState.EXPECTING_FILES, "```diff", 3)
        assert opened.next_state is ParserState.IN_DIFF
        assert opened.fence_open is True
        closed = transition(ParserState.IN_DIFF, "```", 9)
        assert closed.next_state is ParserState.EXPECTING_TRAILER
        assert closed.fence_open is False

    def test_diff_line_keeps_raw(self):
        step = transition(ParserState.IN_DIFF, "pass", 4, "    pass")
        assert step.diff_line == "    pass"

    def test_done_ignores_trailing(self):
        assert transition(ParserState.DONE, "anything", 20).next_state is ParserState.DONE


class TestHarvest:
    def test_file_lines_and_headers(self):
        text = "- file: a/b.py\n--- a/c/d.py\n+++ b/c/d.py"
        assert harvest_file_refs(text) == ["a/b.py", "c/d.py"]


class TestPatchErrors:
    def test_raise_for_validity(self, parser):
        patch = parser.parse("### FACTORY/1 PATCH\n```diff\n+x\n```\n### END")
        with pytest.raises(PatchValidationError) as exc:
            patch.raise_for_validity()
        assert exc.value.errors == ["no files specified"]
        assert "patch validation failed: no files specified" in str(exc.value)

    def test_valid_patch_does_not_raise(self, parser):
        parser.parse(VALID_PATCH).raise_for_validity()

    def test_error_message_none_when_clean(self):
        assert Patch(valid=True).error_message is None


class TestPatchImmutability:
    def test_fields_cannot_be_reassigned(self, parser):
        patch = parser.parse(VALID_PATCH)
        with pytest.raises(dataclasses.FrozenInstanceError):
            patch.valid = False
        with pytest.raises(dataclasses.FrozenInstanceError):
            patch.files = ()

    def test_collections_are_tuples(self, parser):
        patch = parser.parse("- file: backend/x.py")
        assert isinstance(patch.files, tuple)
        assert isinstance(patch.errors, tuple)
        assert not hasattr(patch.errors, "append")

    def test_to_dict_returns_copies(self, parser):
        patch = parser.parse(VALID_PATCH)
        d = patch.to_dict()
        d["files"].append("backend/extra.py")
        d["errors"].append("late")
        assert patch.files == ("backend/api/users.py", "backend/models/user.py")
        assert patch.errors == ()
        assert patch.valid is True
