# FILE: factory/soc/parser.py
"""
SOC Parser

Single forward pass over the trimmed input, driven by an explicit state
machine:

    expecting_header -> expecting_files -> in_diff     -> expecting_trailer -> done
                                        -> in_raw_diff -----------------------> done

transition() is pure: it looks at (state, line) and returns a Step describing
what to do. SOCParser applies the step (record a file, buffer a diff line,
record an error, stop) and owns every policy check (path locality).

Errors are collected, not raised: one parse call returns every problem it
found. The returned Patch is frozen (tuple fields) and valid is derived from
its errors at construction. A Patch with valid=False must never be applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.settings import Settings, get_settings
from factory.soc.errors import PatchValidationError
from factory.soc.grammar import (
    DIFF_END_RE,
    DIFF_START_RE,
    FILE_RE,
    HEADER,
    HEADER_RE,
    RAW_DIFF_HEADER_RE,
    TRAILER,
    TRAILER_RE,
    harvest_file_refs,
    is_path_allowed,
    is_prose,
    validate_diff,
)

logger = logging.getLogger(__name__)


class ParserState(str, Enum):
    EXPECTING_HEADER = "expecting_header"
    EXPECTING_FILES = "expecting_files"
    IN_DIFF = "in_diff"
    IN_RAW_DIFF = "in_raw_diff"
    EXPECTING_TRAILER = "expecting_trailer"
    DONE = "done"


@dataclass(frozen=True)
class Patch:
    """Parsed SOC output."""
    files: Tuple[str, ...] = ()
    content: str = ""
    valid: bool = False
    errors: Tuple[str, ...] = ()

    @property
    def error_message(self) -> Optional[str]:
        if not self.errors:
            return None
        return "patch validation failed: " + "; ".join(self.errors)

    def raise_for_validity(self) -> None:
        if not self.valid:
            raise PatchValidationError(self.error_message or "patch validation failed", list(self.errors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": list(self.files),
            "content": self.content,
            "valid": self.valid,
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class Step:
    """Effects of consuming one line."""
    next_state: ParserState
    file: Optional[str] = None          # declared file to record
    diff_line: Optional[str] = None     # line to append to the diff buffer
    error: Optional[str] = None         # non-aborting error
    fatal: bool = False                 # stop parsing after applying this step
    fence_open: Optional[bool] = None   # True/False to change fence tracking, None leaves it
    harvest: bool = False               # re-scan the whole input for file references


def transition(state: ParserState, line: str, line_no: int, raw_line: Optional[str] = None) -> Step:
    """Pure transition function.

    Args:
        state: current state
        line: stripped line used for structural matching
        line_no: 1-based line number for messages
        raw_line: original line (indentation kept) for the diff buffer
    """
    keep = line if raw_line is None else raw_line

    if state is ParserState.EXPECTING_HEADER:
        if HEADER_RE.match(line):
            return Step(ParserState.EXPECTING_FILES)
        if line == "":
            return Step(state)
        return Step(
            state,
            error=f"invalid header at line {line_no}, expected '{HEADER}'",
            fatal=True,
        )

    if state is ParserState.EXPECTING_FILES:
        m = FILE_RE.match(line)
        if m:
            return Step(state, file=m.group(1))
        if DIFF_START_RE.match(line):
            return Step(ParserState.IN_DIFF, fence_open=True)
        if RAW_DIFF_HEADER_RE.match(line):
            return Step(ParserState.IN_RAW_DIFF, diff_line=keep, harvest=True)
        if line == "":
            return Step(state)
        return Step(state, error=f"expected file list or diff start at line {line_no}")

    if state is ParserState.IN_DIFF:
        if DIFF_END_RE.match(line):
            return Step(ParserState.EXPECTING_TRAILER, fence_open=False)
        if TRAILER_RE.match(line):
            # tolerated, but the fence was never closed
            return Step(ParserState.DONE)
        return Step(state, diff_line=keep)

    if state is ParserState.IN_RAW_DIFF:
        if TRAILER_RE.match(line):
            return Step(ParserState.DONE)
        return Step(state, diff_line=keep)

    if state is ParserState.EXPECTING_TRAILER:
        if TRAILER_RE.match(line):
            return Step(ParserState.DONE)
        if line == "":
            return Step(state)
        return Step(state, error=f"expected trailer '{TRAILER}' at line {line_no}")

    # DONE: trailing lines are ignored
    return Step(state)


class SOCParser:
    """Grammar-driven parser/validator for LLM patch output."""

    def __init__(self, allowed_paths: Optional[Sequence[str]] = None):
        self.allowed_paths = tuple(allowed_paths or ())

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SOCParser":
        """Parser using the FACTORY_ALLOWED_PATHS layout policy."""
        settings = settings or get_settings()
        return cls(settings.allowed_paths)

    def is_path_allowed(self, path: str) -> bool:
        return is_path_allowed(path, self.allowed_paths)

    def parse(self, text: str) -> Patch:
        files: List[str] = []
        errors: List[str] = []
        trimmed = (text or "").strip()
        if not trimmed:
            logger.warning("[soc.parser] empty input")
            return Patch(errors=("empty input",))

        lines = [ln.rstrip("\r") for ln in trimmed.split("\n")]

        for i, line in enumerate(lines, start=1):
            if is_prose(line):
                errors.append(f"prose detected at line {i}: {line.strip()}")

        state = ParserState.EXPECTING_HEADER
        fence_open = False
        harvested = False
        diff_lines: List[str] = []

        for i, raw in enumerate(lines, start=1):
            step = transition(state, raw.strip(), i, raw.rstrip())

            if step.error:
                errors.append(step.error)
            if step.fatal:
                logger.warning("[soc.parser] %s", step.error)
                return Patch(files=tuple(files), errors=tuple(errors))
            if step.file is not None:
                self._record_file(files, errors, step.file)
            if step.harvest and not harvested:
                harvested = True
                for path in harvest_file_refs(trimmed):
                    self._record_file(files, errors, path)
            if step.diff_line is not None:
                diff_lines.append(step.diff_line)
            if step.fence_open is not None:
                fence_open = step.fence_open

            state = step.next_state

        if state is not ParserState.DONE:
            errors.append(f"incomplete patch, ended in state: {state.value}")
        if fence_open:
            errors.append("unclosed diff block")
        if not files:
            errors.append("no files specified")

        content = "\n".join(diff_lines).strip("\n")
        if not content.strip():
            errors.append("empty diff content")
            content = ""
        else:
            diff_error = validate_diff(content)
            if diff_error:
                errors.append(f"invalid diff: {diff_error}")

        patch = Patch(files=tuple(files), content=content, valid=not errors, errors=tuple(errors))
        if patch.valid:
            logger.info("[soc.parser] valid patch files=%s", list(patch.files))
        else:
            logger.info("[soc.parser] %s", patch.error_message)
        return patch

    def _record_file(self, files: List[str], errors: List[str], path: str) -> None:
        if path in files:
            return
        if not self.is_path_allowed(path):
            errors.append(f"file path not allowed: {path}")
        files.append(path)


__all__ = [
    "ParserState",
    "Patch",
    "Step",
    "transition",
    "SOCParser",
]
