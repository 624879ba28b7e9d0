"""SQLAlchemy persistence for briefs, compiled IR specs and parsed patches."""

from factory.storage.errors import PatchNotApplicableError, RecordNotFoundError, StorageError
from factory.storage.models import BriefRecord, IRSpecRecord, PatchRecord
from factory.storage.service import (
    list_specs,
    load_spec,
    mark_patch_applied,
    save_compilation,
    save_patch,
)

__all__ = [
    "StorageError",
    "RecordNotFoundError",
    "PatchNotApplicableError",
    "BriefRecord",
    "IRSpecRecord",
    "PatchRecord",
    "save_compilation",
    "load_spec",
    "list_specs",
    "save_patch",
    "mark_patch_applied",
]
