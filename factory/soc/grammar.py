# FILE: factory/soc/grammar.py
"""
Strict Output Contract (SOC) grammar.

    response   = header NL filelist NL patchblock NL trailer
    header     = "### FACTORY/1 PATCH"
    filelist   = 1*( "- file: " filepath NL )
    patchblock = "```diff" NL 1*udiff NL "```"
    trailer    = "### END"
    filepath   = 1*( ALPHA / DIGIT / "/" / "." / "_" / "-" )

Structural regexes are matched against the STRIPPED line. Everything here is
a pure function of its arguments.

PROSE_RE is applied to every line of the response, diff body included, and
ignores leading whitespace. A context line such as " Let me know" therefore
rejects the patch. The generator is expected to emit diffs whose unchanged
lines do not open with a conversational phrase; a false rejection costs one
regeneration, an accepted chatty response would reach the apply step.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

HEADER = "### FACTORY/1 PATCH"
TRAILER = "### END"

HEADER_RE = re.compile(r"^### FACTORY/1 PATCH\s*$")
TRAILER_RE = re.compile(r"^### END\s*$")
FILE_RE = re.compile(r"^- file: ([a-zA-Z0-9/_.-]+)\s*$")
DIFF_START_RE = re.compile(r"^```diff\s*$")
DIFF_END_RE = re.compile(r"^```\s*$")
RAW_DIFF_HEADER_RE = re.compile(r"^(---|\+\+\+)\s+[ab]/.*")
UNIFIED_DIFF_LINE_RE = re.compile(r"^(---|\+\+\+|@@|\+|-| )")

PROSE_RE = re.compile(
    r"^\s*(here's|here is|let me|i'll|sure[,.!]|certainly|of course|i can|based on|this will|please[,.]|sorry[,.])",
    re.IGNORECASE,
)

REFUSAL_PHRASES: Tuple[str, ...] = (
    "I cannot",
    "I'm unable to",
    "I can't",
    "I'm not able to",
    "I don't have the ability",
    "I'm not programmed to",
    "I'm sorry, but I can't",
    "I cannot assist with",
    "I'm not allowed to",
    "I cannot provide",
    "I'm not capable of",
    "I cannot help with",
    "I won't be able to",
    "I'm unable to assist",
    "I cannot complete",
    "I'm not permitted to",
)

_RAW_FILE_PREFIX = "--- a/"
_RAW_NEW_PREFIX = "+++ b/"


# =============================================================================
# Path locality
# =============================================================================

def is_path_allowed(path: str, allowed_paths: Sequence[str]) -> bool:
    """True when no allow-list is configured, else iff path has an allowed prefix.

    Plain string comparison; the OS never resolves the path.
    """
    if not allowed_paths:
        return True
    return any(path.startswith(prefix) for prefix in allowed_paths)


# =============================================================================
# Content checks
# =============================================================================

def is_prose(line: str) -> bool:
    return PROSE_RE.match(line) is not None


def is_refusal(text: str) -> bool:
    lowered = text.lower()
    return any(phrase.lower() in lowered for phrase in REFUSAL_PHRASES)


def validate_input(text: str) -> Tuple[bool, Optional[str]]:
    """Cheap pre-check before running the full parser.

    Returns:
        (True, None) or (False, reason)
    """
    if not text or not text.strip():
        return False, "empty input"
    if is_refusal(text):
        return False, "refusal detected in input"
    if HEADER not in text:
        return False, "missing required header"
    if TRAILER not in text:
        return False, "missing required trailer"
    return True, None


def validate_diff(content: str) -> Optional[str]:
    """Error string for invalid diff content, None when it is acceptable.

    Once a ``--- a/`` or ``+++ b/`` header is seen, raw code lines are
    tolerated (models often drop the ``+`` prefix).
    """
    has_valid_line = False
    has_file_header = False

    for line in content.split("\n"):
        if line == "":
            continue
        if line.startswith(_RAW_FILE_PREFIX) or line.startswith(_RAW_NEW_PREFIX):
            has_file_header = True
            has_valid_line = True
            continue
        if UNIFIED_DIFF_LINE_RE.match(line) or has_file_header:
            has_valid_line = True
            continue
        return f"invalid diff line: {line}"

    if not has_valid_line:
        return "no valid diff lines found"
    return None


def harvest_file_refs(text: str) -> List[str]:
    """Every path named by a ``- file:`` line or a ``--- a/`` header, in order."""
    found: List[str] = []
    for raw in text.split("\n"):
        line = raw.strip()
        m = FILE_RE.match(line)
        if m:
            found.append(m.group(1))
        elif line.startswith(_RAW_FILE_PREFIX):
            rest = line[len(_RAW_FILE_PREFIX):].split()
            if rest:
                found.append(rest[0])
    return found


__all__ = [
    "HEADER",
    "TRAILER",
    "HEADER_RE",
    "TRAILER_RE",
    "FILE_RE",
    "DIFF_START_RE",
    "DIFF_END_RE",
    "RAW_DIFF_HEADER_RE",
    "PROSE_RE",
    "REFUSAL_PHRASES",
    "is_path_allowed",
    "is_prose",
    "is_refusal",
    "validate_input",
    "validate_diff",
    "harvest_file_refs",
]
