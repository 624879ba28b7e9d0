# FILE: factory/overlays/resolver.py
"""
Overlay Resolver

Loads overlay bundles (<name>.yaml) from the configured overlay paths and
applies them to a compiled IRSpec.

Resolution:
1. Load every requested overlay (registry first, then the filesystem)
2. Resolve dependencies depth-first; a cycle raises CircularDependencyError
3. Order: dependency order when any overlay declares dependencies,
   otherwise ascending priority (higher priority applied last)
4. Apply IR modifications to a deep copy of the base IR
5. Collect prompt enhancements (grouped by agent type), validation rules,
   metadata, and conflicts (two overlays replacing the same path)

Results are cached by sorted overlay names + the IR content hash (id and
timestamps excluded). Entries expire after the cache TTL and the oldest entry
is evicted once the cache is full (FACTORY_OVERLAY_CACHE_TTL / _SIZE).
"""

from __future__ import annotations

import copy
import logging
import re
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from config.settings import get_settings
from factory.ir.canonical import compute_content_hash
from factory.ir.schema import IRSpec
from factory.overlays.errors import CircularDependencyError, OverlayError, OverlayNotFoundError
from factory.overlays.registry import OverlayRegistry
from factory.overlays.schemas import (
    ConflictInfo,
    IRModification,
    ModificationOp,
    OverlayMetadata,
    OverlaySpec,
    PromptEnhancement,
    ResolverResult,
    ValidationRule,
)

logger = logging.getLogger(__name__)


BUILTIN_OVERLAY_DIR = Path(__file__).resolve().parent / "definitions"

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")

OVERLAY_FEATURE_DESCRIPTION = "Added by overlay"


# =============================================================================
# Loading
# =============================================================================

def load_overlay_file(path: Path) -> OverlaySpec:
    """Parse one overlay YAML file. Raises OverlayError on bad content."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise OverlayError(f"failed to parse overlay YAML {path.name}: {e}") from e

    if not isinstance(raw, dict):
        raise OverlayError(f"overlay file {path.name} is not a mapping")

    try:
        return OverlaySpec.model_validate(raw)
    except ValidationError as e:
        raise OverlayError(f"invalid overlay {path.name}: {e}") from e


# =============================================================================
# IR modifications (dotted paths into IRSpec.to_dict())
# =============================================================================

def _walk(doc: Dict[str, Any], path: str) -> tuple:
    """Return (parent_dict, last_key), creating intermediate dicts."""
    parts = [p for p in path.split(".") if p]
    if not parts:
        raise OverlayError("modification path is empty")

    node = doc
    for part in parts[:-1]:
        nxt = node.get(part)
        if nxt is None:
            nxt = {}
            node[part] = nxt
        if not isinstance(nxt, dict):
            raise OverlayError(f"path {path}: '{part}' is not an object")
        node = nxt
    return node, parts[-1]


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _overlay_feature(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {
        "name": str(value),
        "description": OVERLAY_FEATURE_DESCRIPTION,
        "type": "overlay",
        "priority": "medium",
    }


def apply_modification(doc: Dict[str, Any], mod: IRModification) -> None:
    """Apply one modification in place."""
    parent, key = _walk(doc, mod.path)
    is_features = mod.path == "app.features"

    if mod.operation is ModificationOp.REPLACE:
        parent[key] = copy.deepcopy(mod.value)
        return

    if mod.operation is ModificationOp.MERGE:
        target = parent.get(key)
        if target is None:
            target = {}
            parent[key] = target
        if not isinstance(target, dict) or not isinstance(mod.value, dict):
            raise OverlayError(f"merge at {mod.path} needs an object target and value")
        target.update(copy.deepcopy(mod.value))
        return

    target = parent.get(key)
    if target is None:
        target = []
        parent[key] = target
    if not isinstance(target, list):
        raise OverlayError(f"{mod.operation.value} at {mod.path} needs a list target")

    if mod.operation is ModificationOp.ADD:
        if is_features:
            names = {f.get("name") for f in target if isinstance(f, dict)}
            for item in _as_list(mod.value):
                feature = _overlay_feature(item)
                if feature.get("name") not in names:
                    names.add(feature.get("name"))
                    target.append(feature)
        else:
            for item in _as_list(mod.value):
                if item not in target:
                    target.append(copy.deepcopy(item))
        return

    if mod.operation is ModificationOp.REMOVE:
        drop = _as_list(mod.value)
        if is_features:
            target[:] = [f for f in target if not (isinstance(f, dict) and f.get("name") in drop)]
        else:
            target[:] = [item for item in target if item not in drop]
        return

    raise OverlayError(f"unsupported operation: {mod.operation}")


def apply_overlay(spec: IRSpec, overlay: OverlaySpec) -> IRSpec:
    """Return a new IRSpec with every modification of overlay applied."""
    doc = spec.to_dict()
    for mod in overlay.ir_modifications:
        try:
            apply_modification(doc, mod)
        except OverlayError as e:
            raise OverlayError(f"overlay {overlay.name}: failed to apply modification at {mod.path}: {e}") from e
    try:
        return IRSpec.model_validate(doc)
    except ValidationError as e:
        raise OverlayError(f"overlay {overlay.name} produced an invalid IR: {e}") from e


def find_conflicts(overlays: Sequence[OverlaySpec]) -> List[ConflictInfo]:
    """Paths replaced by more than one overlay (last applied wins)."""
    by_path: Dict[str, List[str]] = {}
    for overlay in overlays:
        for mod in overlay.ir_modifications:
            if mod.operation is ModificationOp.REPLACE:
                names = by_path.setdefault(mod.path, [])
                if overlay.name not in names:
                    names.append(overlay.name)

    return [
        ConflictInfo(
            path=path,
            overlays=names,
            resolution="priority",
            description=f"{len(names)} overlays replace {path}; {names[-1]} is applied last",
        )
        for path, names in by_path.items()
        if len(names) > 1
    ]


def _rebind(cached: ResolverResult, base_spec: IRSpec) -> ResolverResult:
    # cache entries are shared across compilations; the caller's identity wins
    cached.ir_spec.id = base_spec.id
    cached.ir_spec.metadata.created_at = base_spec.metadata.created_at
    cached.ir_spec.metadata.updated_at = base_spec.metadata.updated_at
    return cached


# =============================================================================
# Resolver
# =============================================================================

class FileSystemResolver:
    """Filesystem-backed overlay resolver with an in-memory registry."""

    def __init__(
        self,
        overlay_paths: Optional[Sequence[str]] = None,
        enable_caching: bool = True,
        registry: Optional[OverlayRegistry] = None,
        cache_ttl: Optional[float] = None,
        cache_size: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        if overlay_paths is None:
            overlay_paths = list(settings.overlay_paths) + [str(BUILTIN_OVERLAY_DIR)]
        self.overlay_paths = [Path(p) for p in overlay_paths]
        self.enable_caching = enable_caching
        self.registry = registry or OverlayRegistry()
        self.cache_ttl = settings.overlay_cache_ttl if cache_ttl is None else cache_ttl
        self.cache_size = settings.overlay_cache_size if cache_size is None else cache_size
        self._clock = clock
        self._cache: OrderedDict[str, Tuple[float, ResolverResult]] = OrderedDict()
        self._cache_lock = threading.Lock()
        self._load_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Loading / listing
    # -------------------------------------------------------------------------

    def load_overlay(self, name: str) -> OverlaySpec:
        if not _NAME_RE.match(name or ""):
            raise OverlayError(f"invalid overlay name: {name!r}")

        found = self.registry.find(name)
        if found is not None:
            return found

        with self._load_lock:
            found = self.registry.find(name)
            if found is not None:
                return found

            for base in self.overlay_paths:
                candidate = base / f"{name}.yaml"
                if not candidate.is_file():
                    continue
                overlay = load_overlay_file(candidate)
                if overlay.name != name:
                    raise OverlayError(
                        f"overlay file {candidate.name} declares name {overlay.name!r}"
                    )
                self.registry.register(overlay)
                logger.debug("[overlays.resolver] loaded %s from %s", name, candidate)
                return overlay

        raise OverlayNotFoundError(f"overlay not found: {name}")

    def list_available(self) -> List[OverlayMetadata]:
        out: List[OverlayMetadata] = []
        seen = set()
        for base in self.overlay_paths:
            if not base.is_dir():
                continue
            for path in sorted(base.glob("*.yaml")):
                try:
                    overlay = load_overlay_file(path)
                except OverlayError as e:
                    logger.warning("[overlays.resolver] skipping invalid overlay %s: %s", path, e)
                    continue
                if overlay.name in seen:
                    continue
                seen.add(overlay.name)
                out.append(overlay.metadata)
        return out

    def validate_overlays(self, names: Sequence[str]) -> None:
        """Raise OverlayError if any overlay is missing, malformed, or has bad dependencies."""
        loaded: Dict[str, OverlaySpec] = {}
        for name in names:
            overlay = self.load_overlay(name)
            ok, reason = overlay.validate_metadata()
            if not ok:
                raise OverlayError(f"overlay {name} is invalid: {reason}")
            loaded[name] = overlay
        self._resolve_dependencies(list(names), loaded)

    def get_conflicts(self, names: Sequence[str]) -> List[ConflictInfo]:
        return find_conflicts([self.load_overlay(n) for n in names])

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve_overlays(self, names: Sequence[str], base_spec: IRSpec) -> ResolverResult:
        names = list(names)
        cache_key = self._cache_key(names, base_spec) if self.enable_caching else None
        if cache_key is not None:
            cached = self._get_cached(cache_key)
            if cached is not None:
                logger.debug("[overlays.resolver] cache hit %s", cache_key)
                return _rebind(cached, base_spec)

        overlays: Dict[str, OverlaySpec] = {name: self.load_overlay(name) for name in names}
        resolved = self._resolve_dependencies(names, overlays)
        ordered = self._order(resolved, overlays)

        spec = base_spec.model_copy(deep=True)
        prompt_changes: Dict[str, List[PromptEnhancement]] = {}
        validation_rules: List[ValidationRule] = []
        metadata: Dict[str, OverlayMetadata] = {}

        for name in ordered:
            overlay = overlays[name]
            spec = apply_overlay(spec, overlay)
            for enhancement in overlay.prompt_enhancements:
                prompt_changes.setdefault(enhancement.agent_type, []).append(enhancement)
            validation_rules.extend(overlay.validation_rules)
            metadata[name] = overlay.metadata

        result = ResolverResult(
            resolved_overlays=resolved,
            applied_order=ordered,
            conflicts=find_conflicts([overlays[n] for n in ordered]),
            ir_spec=spec,
            prompt_changes=prompt_changes,
            validation_rules=validation_rules,
            metadata=metadata,
        )

        logger.info(
            "[overlays.resolver] applied=%s conflicts=%d",
            ordered,
            len(result.conflicts),
        )

        if cache_key is not None:
            self._set_cached(cache_key, result)
        return result

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def _get_cached(self, key: str) -> Optional[ResolverResult]:
        with self._cache_lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            stored_at, result = entry
            if self._clock() - stored_at >= self.cache_ttl:
                del self._cache[key]
                return None
            return result.model_copy(deep=True)

    def _set_cached(self, key: str, result: ResolverResult) -> None:
        if self.cache_size <= 0:
            return
        with self._cache_lock:
            now = self._clock()
            expired = [k for k, (stored_at, _) in self._cache.items() if now - stored_at >= self.cache_ttl]
            for k in expired:
                del self._cache[k]
            self._cache[key] = (now, result.model_copy(deep=True))
            self._cache.move_to_end(key)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)

    def _resolve_dependencies(self, names: List[str], overlays: Dict[str, OverlaySpec]) -> List[str]:
        resolved: List[str] = []
        done = set()
        visiting = set()

        def visit(name: str) -> None:
            if name in visiting:
                raise CircularDependencyError(f"circular dependency detected: {name}")
            if name in done:
                return
            visiting.add(name)

            overlay = overlays.get(name)
            if overlay is None:
                try:
                    overlay = self.load_overlay(name)
                except OverlayNotFoundError as e:
                    raise OverlayNotFoundError(f"dependency not found: {name}") from e
                overlays[name] = overlay

            for dep in overlay.dependencies:
                visit(dep)

            visiting.discard(name)
            done.add(name)
            resolved.append(name)

        for name in names:
            visit(name)
        return resolved

    @staticmethod
    def _order(resolved: List[str], overlays: Dict[str, OverlaySpec]) -> List[str]:
        if any(overlays[n].dependencies for n in resolved):
            return list(resolved)
        return sorted(resolved, key=lambda n: overlays[n].metadata.priority)

    @staticmethod
    def _cache_key(names: Sequence[str], spec: IRSpec) -> str:
        return ",".join(sorted(names)) + ":" + compute_content_hash(spec)


__all__ = [
    "BUILTIN_OVERLAY_DIR",
    "FileSystemResolver",
    "apply_modification",
    "apply_overlay",
    "find_conflicts",
    "load_overlay_file",
]
