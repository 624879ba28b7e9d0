# FILE: factory/api/ir_router.py
"""
IR API Router

- POST /ir/compile            brief -> CompilationResult (optionally persisted)
- POST /ir/overlays/suggest   brief -> OverlayDetectionResult
- GET  /ir/specs/{spec_id}    stored spec, hash verified
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from factory.api.schemas import CompileRequest, CompileResponse, SuggestRequest
from factory.ir.compiler import SpecificationCompiler
from factory.ir.errors import EmptyBriefError
from factory.storage.db import get_db
from factory.storage.errors import RecordNotFoundError, StorageError
from factory.storage.service import load_spec, save_compilation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ir", tags=["ir"])


@lru_cache(maxsize=1)
def get_compiler() -> SpecificationCompiler:
    """Shared compiler instance; safe for concurrent requests."""
    return SpecificationCompiler()


@router.post("/compile", response_model=CompileResponse)
def compile_brief(
    request: CompileRequest,
    compiler: SpecificationCompiler = Depends(get_compiler),
    db: Session = Depends(get_db),
):
    try:
        if request.overlays:
            result = compiler.compile_with_overlays(request.brief, request.overlays)
        else:
            result = compiler.compile(request.brief)
    except EmptyBriefError as e:
        raise HTTPException(status_code=422, detail=str(e))

    response = CompileResponse(result=result.to_dict())
    if request.persist:
        rec = save_compilation(db, result)
        response.spec_id = rec.spec_id
        response.spec_hash = rec.spec_hash
    return response


@router.post("/overlays/suggest")
def suggest_overlays(
    request: SuggestRequest,
    compiler: SpecificationCompiler = Depends(get_compiler),
) -> Dict[str, Any]:
    return compiler.suggest_overlays(request.brief).to_dict()


@router.get("/specs/{spec_id}")
def get_spec(spec_id: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    try:
        return load_spec(db, spec_id).to_dict()
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail=f"Spec not found: {spec_id}")
    except StorageError as e:
        logger.exception("[ir] Error loading spec %s", spec_id)
        raise HTTPException(status_code=500, detail=str(e))


__all__ = ["router", "get_compiler"]
