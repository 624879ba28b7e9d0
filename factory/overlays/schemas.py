# FILE: factory/overlays/schemas.py
"""Overlay bundle shapes (Pydantic). One OverlaySpec per <name>.yaml file."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from factory.ir.schema import IRSpec


class OverlayType(str, Enum):
    DOMAIN = "domain"
    COMPLIANCE = "compliance"
    CAPABILITY = "capability"


class ModificationOp(str, Enum):
    ADD = "add"
    REPLACE = "replace"
    MERGE = "merge"
    REMOVE = "remove"


# Priority: higher is applied later
PRIORITY_LOW = 1
PRIORITY_MEDIUM = 5
PRIORITY_HIGH = 10


class OverlayMetadata(BaseModel):
    name: str = ""
    version: str = ""
    type: Optional[OverlayType] = None
    priority: int = PRIORITY_MEDIUM
    description: str = ""
    author: str = ""
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    config: Dict[str, str] = Field(default_factory=dict)


class PromptEnhancement(BaseModel):
    agent_type: str          # backend, frontend, database ...
    section: str = "system"  # system, context, examples ...
    content: str
    position: str = "after"  # before, after, replace
    conditions: Dict[str, str] = Field(default_factory=dict)
    priority: int = PRIORITY_MEDIUM


class ValidationRule(BaseModel):
    name: str
    type: str                # security, compliance, performance ...
    severity: str = "warning"
    pattern: str = ""
    message: str = ""
    conditions: Dict[str, str] = Field(default_factory=dict)
    remediation: str = ""


class IRModification(BaseModel):
    path: str                # dotted path into the IR JSON, e.g. "app.features"
    operation: ModificationOp
    value: Any = None
    condition: str = ""


class OverlaySpec(BaseModel):
    metadata: OverlayMetadata = Field(default_factory=OverlayMetadata)
    dependencies: List[str] = Field(default_factory=list)
    ir_modifications: List[IRModification] = Field(default_factory=list)
    prompt_enhancements: List[PromptEnhancement] = Field(default_factory=list)
    validation_rules: List[ValidationRule] = Field(default_factory=list)
    templates: Dict[str, str] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.name

    def validate_metadata(self) -> Tuple[bool, Optional[str]]:
        if not self.metadata.name:
            return False, "overlay name is required"
        if not self.metadata.version:
            return False, "overlay version is required"
        if self.metadata.type is None:
            return False, "overlay type is required"
        return True, None


class ConflictInfo(BaseModel):
    path: str
    overlays: List[str]
    resolution: str = "priority"
    description: str = ""


class ResolverResult(BaseModel):
    resolved_overlays: List[str] = Field(default_factory=list)
    applied_order: List[str] = Field(default_factory=list)
    conflicts: List[ConflictInfo] = Field(default_factory=list)
    ir_spec: IRSpec
    prompt_changes: Dict[str, List[PromptEnhancement]] = Field(default_factory=dict)
    validation_rules: List[ValidationRule] = Field(default_factory=list)
    metadata: Dict[str, OverlayMetadata] = Field(default_factory=dict)


__all__ = [
    "OverlayType",
    "ModificationOp",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "OverlayMetadata",
    "PromptEnhancement",
    "ValidationRule",
    "IRModification",
    "OverlaySpec",
    "ConflictInfo",
    "ResolverResult",
]
