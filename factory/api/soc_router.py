# FILE: factory/api/soc_router.py
"""
SOC API Router

Parsing never fails the request: an invalid patch comes back with
valid=false and its errors (HTTP 200).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from factory.api.schemas import (
    ParseRequest,
    ParseResponse,
    PatchStatusResponse,
    ValidateInputRequest,
    ValidateInputResponse,
)
from factory.soc.grammar import validate_input
from factory.soc.parser import SOCParser
from factory.storage.db import get_db
from factory.storage.errors import PatchNotApplicableError, RecordNotFoundError
from factory.storage.service import mark_patch_applied, save_patch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/soc", tags=["soc"])


@router.post("/parse", response_model=ParseResponse)
def parse_patch(request: ParseRequest, db: Session = Depends(get_db)):
    if request.allowed_paths is None:
        parser = SOCParser.from_settings()
    else:
        parser = SOCParser(request.allowed_paths)

    patch = parser.parse(request.text)
    response = ParseResponse(**patch.to_dict())
    if request.persist:
        rec = save_patch(db, patch, spec_id=request.spec_id)
        response.patch_id = rec.patch_id
    return response


@router.post("/validate-input", response_model=ValidateInputResponse)
def validate_patch_input(request: ValidateInputRequest):
    ok, error = validate_input(request.text)
    return ValidateInputResponse(valid=ok, error=error)


@router.post("/patches/{patch_id}/apply", response_model=PatchStatusResponse)
def apply_patch(patch_id: str, db: Session = Depends(get_db)):
    try:
        rec = mark_patch_applied(db, patch_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail=f"Patch not found: {patch_id}")
    except PatchNotApplicableError as e:
        logger.warning("[soc] refused to apply %s: %s", patch_id, e)
        raise HTTPException(status_code=409, detail=str(e))
    return PatchStatusResponse(patch_id=rec.patch_id, status=rec.status, valid=rec.valid)


__all__ = ["router"]
