# FILE: factory/ir/canonical.py
"""Canonical JSON serialization for IR hashing.

RULES:
1. Keys: sorted alphabetically at all nesting levels
2. Whitespace: none (compact separators)
3. Lists: order preserved (endpoint and field order is meaningful in the IR)
4. Encoding: UTF-8, no BOM

compute_ir_hash() covers the whole spec and guards persisted spec integrity.
compute_content_hash() leaves out the per-compile id and timestamps, so two
compilations of the same brief share it (the overlay resolver's cache key).
"""

from __future__ import annotations

import copy
import hashlib
import json
from typing import Any, Dict, Union

from factory.ir.schema import IRSpec

VOLATILE_METADATA_KEYS = ("created_at", "updated_at")


def canonical_json_bytes(obj: Any) -> bytes:
    return json.dumps(
        obj,
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
    ).encode("utf-8")


def canonical_json_string(obj: Any) -> str:
    return canonical_json_bytes(obj).decode("utf-8")


def compute_ir_hash(spec: Union[IRSpec, Dict[str, Any]]) -> str:
    """SHA-256 hex digest of the spec in canonical form.

    Accepts either an IRSpec or its ``to_dict()`` form; both hash identically.
    """
    if isinstance(spec, IRSpec):
        spec = spec.to_dict()
    return hashlib.sha256(canonical_json_bytes(spec)).hexdigest()


def compute_content_hash(spec: Union[IRSpec, Dict[str, Any]]) -> str:
    """Hash of the spec without its id and metadata timestamps."""
    d = spec.to_dict() if isinstance(spec, IRSpec) else copy.deepcopy(spec)
    d.pop("id", None)
    for key in VOLATILE_METADATA_KEYS:
        d.get("metadata", {}).pop(key, None)
    return hashlib.sha256(canonical_json_bytes(d)).hexdigest()


def verify_hash(spec: Union[IRSpec, Dict[str, Any]], expected_hash: str) -> bool:
    return compute_ir_hash(spec) == expected_hash


__all__ = [
    "canonical_json_bytes",
    "canonical_json_string",
    "compute_content_hash",
    "compute_ir_hash",
    "verify_hash",
]
