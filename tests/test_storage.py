# FILE: tests/test_storage.py
"""Tests for factory/storage (SQLAlchemy persistence of specs and patches)."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from factory.ir.canonical import compute_ir_hash
from factory.ir.compiler import SpecificationCompiler
from factory.soc.parser import SOCParser
from factory.storage.db import Base
from factory.storage import models  # noqa: F401  (register tables)
from factory.storage.errors import PatchNotApplicableError, RecordNotFoundError, StorageError
from factory.storage.models import BriefRecord, IRSpecRecord
from factory.storage.service import (
    list_specs,
    load_spec,
    mark_patch_applied,
    save_compilation,
    save_patch,
)

BRIEF = "Create an ecommerce platform with user authentication, product catalog, shopping cart, and payment processing"

VALID_PATCH = (
    "### FACTORY/1 PATCH\n"
    "- file: backend/app.py\n"
    "```diff\n"
    "+print('hi')\n"
    "```\n"
    "### END"
)


def _make_session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        echo=False,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)()


@pytest.fixture
def db():
    session = _make_session()
    yield session
    session.close()


class TestSpecs:
    def test_save_and_load(self, db):
        result = SpecificationCompiler().compile(BRIEF)
        rec = save_compilation(db, result)

        assert rec.spec_id == result.spec.id
        assert rec.spec_hash == compute_ir_hash(result.spec)
        assert rec.domain == "ecommerce"
        assert rec.required_overlays == ["ecommerce"]

        loaded = load_spec(db, rec.spec_id)
        assert loaded.to_dict() == result.spec.to_dict()

    def test_brief_stored(self, db):
        rec = save_compilation(db, SpecificationCompiler().compile(BRIEF))
        brief = db.query(BriefRecord).filter(BriefRecord.brief_id == rec.brief_id).one()
        assert brief.text == BRIEF

    def test_tampered_spec_rejected(self, db):
        rec = save_compilation(db, SpecificationCompiler().compile(BRIEF))
        tampered = dict(rec.spec_json)
        tampered["brief"] = "something else"
        rec.spec_json = tampered
        db.commit()

        with pytest.raises(StorageError, match="hash mismatch"):
            load_spec(db, rec.spec_id)

    def test_missing_spec(self, db):
        with pytest.raises(RecordNotFoundError):
            load_spec(db, "does-not-exist")

    def test_list_by_domain(self, db):
        compiler = SpecificationCompiler()
        save_compilation(db, compiler.compile(BRIEF))
        save_compilation(db, compiler.compile("Create a user management system with REST API"))

        assert len(list_specs(db)) == 2
        only = list_specs(db, domain="ecommerce")
        assert [r.domain for r in only] == ["ecommerce"]
        assert db.query(IRSpecRecord).count() == 2


class TestPatches:
    def test_valid_patch_pending(self, db):
        patch = SOCParser(["backend/"]).parse(VALID_PATCH)
        rec = save_patch(db, patch)
        assert rec.valid is True
        assert rec.status == models.PATCH_STATUS_PENDING
        assert rec.files == ["backend/app.py"]

    def test_apply(self, db):
        rec = save_patch(db, SOCParser(["backend/"]).parse(VALID_PATCH))
        applied = mark_patch_applied(db, rec.patch_id)
        assert applied.status == models.PATCH_STATUS_APPLIED
        assert applied.applied_at is not None

    def test_apply_is_idempotent(self, db):
        rec = save_patch(db, SOCParser(["backend/"]).parse(VALID_PATCH))
        first = mark_patch_applied(db, rec.patch_id).applied_at
        assert mark_patch_applied(db, rec.patch_id).applied_at == first

    def test_invalid_patch_never_applied(self, db):
        patch = SOCParser(["frontend/"]).parse(VALID_PATCH)
        assert patch.valid is False

        rec = save_patch(db, patch)
        assert rec.status == models.PATCH_STATUS_REJECTED
        assert rec.errors == ["file path not allowed: backend/app.py"]

        with pytest.raises(PatchNotApplicableError):
            mark_patch_applied(db, rec.patch_id)

    def test_missing_patch(self, db):
        with pytest.raises(RecordNotFoundError):
            mark_patch_applied(db, "nope")

    def test_patch_linked_to_spec(self, db):
        spec_rec = save_compilation(db, SpecificationCompiler().compile(BRIEF))
        rec = save_patch(db, SOCParser(["backend/"]).parse(VALID_PATCH), spec_id=spec_rec.spec_id)
        assert rec.spec_id == spec_rec.spec_id


class TestInitDb:
    def test_creates_tables_on_bind(self):
        from sqlalchemy import inspect

        from factory.storage.db import init_db

        engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
        init_db(bind=engine)
        assert {"briefs", "ir_specs", "patches"} <= set(inspect(engine).get_table_names())
