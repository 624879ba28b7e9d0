# FILE: factory/storage/service.py
"""Persistence for compiled specs and parsed patches.

IR specs are stored as JSON together with the SHA-256 of their canonical
form. load_spec() recomputes the hash and refuses tampered rows.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from factory.ir.canonical import compute_ir_hash
from factory.ir.schema import CompilationResult, IRSpec
from factory.soc.parser import Patch
from factory.storage.errors import PatchNotApplicableError, RecordNotFoundError, StorageError
from factory.storage.models import (
    PATCH_STATUS_APPLIED,
    PATCH_STATUS_PENDING,
    PATCH_STATUS_REJECTED,
    BriefRecord,
    IRSpecRecord,
    PatchRecord,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Specs
# =============================================================================

def save_compilation(db: Session, result: CompilationResult) -> IRSpecRecord:
    """Persist the brief and its compiled spec in one commit."""
    spec = result.spec
    spec_json = spec.to_dict()
    spec_hash = compute_ir_hash(spec_json)

    brief = BriefRecord(brief_id=str(uuid4()), text=spec.brief)
    rec = IRSpecRecord(
        spec_id=spec.id or str(uuid4()),
        brief_id=brief.brief_id,
        spec_hash=spec_hash,
        app_name=spec.app.name,
        domain=spec.app.domain,
        confidence=result.confidence,
        required_overlays=list(result.required_overlays),
        suggested_overlays=list(result.suggested_overlays),
        spec_json=spec_json,
    )
    db.add(brief)
    db.add(rec)
    db.commit()

    logger.info("[storage] saved spec %s hash=%s", rec.spec_id, spec_hash[:12])
    return rec


def get_spec_record(db: Session, spec_id: str) -> Optional[IRSpecRecord]:
    return db.query(IRSpecRecord).filter(IRSpecRecord.spec_id == spec_id).first()


def load_spec(db: Session, spec_id: str) -> IRSpec:
    """Load a spec and verify its stored hash."""
    rec = get_spec_record(db, spec_id)
    if rec is None:
        raise RecordNotFoundError(f"spec not found: {spec_id}")

    actual = compute_ir_hash(rec.spec_json)
    if actual != rec.spec_hash:
        logger.error("[storage] hash mismatch for spec %s", spec_id)
        raise StorageError(f"spec hash mismatch for {spec_id}: stored={rec.spec_hash} actual={actual}")

    return IRSpec.model_validate(rec.spec_json)


def list_specs(db: Session, domain: Optional[str] = None, limit: int = 50) -> List[IRSpecRecord]:
    q = db.query(IRSpecRecord)
    if domain:
        q = q.filter(IRSpecRecord.domain == domain)
    return q.order_by(IRSpecRecord.created_at.desc()).limit(limit).all()


# =============================================================================
# Patches
# =============================================================================

def save_patch(db: Session, patch: Patch, spec_id: Optional[str] = None) -> PatchRecord:
    """Persist a parsed patch. Invalid patches are stored as rejected."""
    rec = PatchRecord(
        patch_id=str(uuid4()),
        spec_id=spec_id,
        files=list(patch.files),
        content=patch.content,
        valid=patch.valid,
        errors=list(patch.errors),
        status=PATCH_STATUS_PENDING if patch.valid else PATCH_STATUS_REJECTED,
    )
    db.add(rec)
    db.commit()

    logger.info("[storage] saved patch %s valid=%s files=%d", rec.patch_id, rec.valid, len(rec.files))
    return rec


def mark_patch_applied(db: Session, patch_id: str) -> PatchRecord:
    rec = db.query(PatchRecord).filter(PatchRecord.patch_id == patch_id).first()
    if rec is None:
        raise RecordNotFoundError(f"patch not found: {patch_id}")
    if not rec.valid:
        raise PatchNotApplicableError(f"patch {patch_id} is invalid and cannot be applied")
    if rec.status == PATCH_STATUS_APPLIED:
        return rec

    rec.status = PATCH_STATUS_APPLIED
    rec.applied_at = datetime.utcnow()
    db.commit()

    logger.info("[storage] patch %s marked applied", patch_id)
    return rec


__all__ = [
    "save_compilation",
    "get_spec_record",
    "load_spec",
    "list_specs",
    "save_patch",
    "mark_patch_applied",
]
