# FILE: factory/storage/models.py
"""Factory front-end database models.

- BriefRecord: the raw brief as submitted
- IRSpecRecord: compiled IR (canonical JSON + sha256 for integrity checks)
- PatchRecord: parsed SOC output and its apply status
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, JSON, String, Text

from factory.storage.db import Base


PATCH_STATUS_PENDING = "pending"
PATCH_STATUS_APPLIED = "applied"
PATCH_STATUS_REJECTED = "rejected"


class BriefRecord(Base):
    __tablename__ = "briefs"

    brief_id = Column(String(36), primary_key=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class IRSpecRecord(Base):
    __tablename__ = "ir_specs"

    # Identifiers
    spec_id = Column(String(36), primary_key=True)
    brief_id = Column(String(36), ForeignKey("briefs.brief_id"), nullable=True, index=True)

    # Integrity
    spec_hash = Column(String(64), nullable=False, index=True)

    # Summary columns for listing without loading spec_json
    app_name = Column(String(256), nullable=False, default="")
    domain = Column(String(64), nullable=False, default="general")
    confidence = Column(Float, nullable=False, default=0.0)

    # Overlays chosen at compile time
    required_overlays = Column(JSON, nullable=False, default=list)
    suggested_overlays = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Full IR payload (structured JSON, hashed in canonical form)
    spec_json = Column(JSON, nullable=False)

    __table_args__ = (
        Index("ix_ir_specs_domain_created", "domain", "created_at"),
    )


class PatchRecord(Base):
    __tablename__ = "patches"

    patch_id = Column(String(36), primary_key=True)
    spec_id = Column(String(36), ForeignKey("ir_specs.spec_id"), nullable=True, index=True)

    files = Column(JSON, nullable=False, default=list)
    content = Column(Text, nullable=False, default="")
    valid = Column(Boolean, nullable=False, default=False)
    errors = Column(JSON, nullable=False, default=list)

    # pending | applied | rejected
    status = Column(String(16), nullable=False, default=PATCH_STATUS_PENDING)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    applied_at = Column(DateTime, nullable=True)


__all__ = [
    "BriefRecord",
    "IRSpecRecord",
    "PatchRecord",
    "PATCH_STATUS_PENDING",
    "PATCH_STATUS_APPLIED",
    "PATCH_STATUS_REJECTED",
]
