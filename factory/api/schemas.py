# FILE: factory/api/schemas.py
"""Request/response models for the factory HTTP routers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# IR
# =============================================================================

class CompileRequest(BaseModel):
    brief: str
    overlays: Optional[List[str]] = None
    persist: bool = False


class CompileResponse(BaseModel):
    result: Dict[str, Any]
    spec_id: Optional[str] = None
    spec_hash: Optional[str] = None


class SuggestRequest(BaseModel):
    brief: str


# =============================================================================
# SOC
# =============================================================================

class ParseRequest(BaseModel):
    text: str
    allowed_paths: Optional[List[str]] = None  # None -> FACTORY_ALLOWED_PATHS
    persist: bool = False
    spec_id: Optional[str] = None


class ParseResponse(BaseModel):
    files: List[str] = Field(default_factory=list)
    content: str = ""
    valid: bool = False
    errors: List[str] = Field(default_factory=list)
    patch_id: Optional[str] = None


class ValidateInputRequest(BaseModel):
    text: str


class ValidateInputResponse(BaseModel):
    valid: bool
    error: Optional[str] = None


class PatchStatusResponse(BaseModel):
    patch_id: str
    status: str
    valid: bool
