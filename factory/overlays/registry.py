# FILE: factory/overlays/registry.py
"""In-memory overlay registry. Thread-safe."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from factory.overlays.errors import OverlayError, OverlayNotFoundError
from factory.overlays.schemas import OverlayMetadata, OverlaySpec

logger = logging.getLogger(__name__)


class OverlayRegistry:
    def __init__(self):
        self._overlays: Dict[str, OverlaySpec] = {}
        self._lock = threading.Lock()

    def register(self, overlay: OverlaySpec) -> None:
        ok, reason = overlay.validate_metadata()
        if not ok:
            raise OverlayError(f"cannot register overlay: {reason}")
        with self._lock:
            if overlay.name in self._overlays:
                raise OverlayError(f"overlay already registered: {overlay.name}")
            self._overlays[overlay.name] = overlay
        logger.debug("[overlays.registry] registered %s v%s", overlay.name, overlay.metadata.version)

    def get(self, name: str) -> OverlaySpec:
        found = self.find(name)
        if found is None:
            raise OverlayNotFoundError(f"overlay not found: {name}")
        return found

    def find(self, name: str) -> Optional[OverlaySpec]:
        with self._lock:
            return self._overlays.get(name)

    def list(self) -> List[OverlayMetadata]:
        with self._lock:
            return [o.metadata for o in self._overlays.values()]

    def remove(self, name: str) -> None:
        with self._lock:
            if self._overlays.pop(name, None) is None:
                raise OverlayNotFoundError(f"overlay not found: {name}")

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._overlays

    def __len__(self) -> int:
        with self._lock:
            return len(self._overlays)


__all__ = ["OverlayRegistry"]
