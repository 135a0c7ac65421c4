"""
Write-once annotation store.

Per-point results are stored under (point id, key). Each pair may be written
exactly once, so concurrent preprocessing tasks, which each own disjoint
point ids, can never overwrite each other's results. Reads and writes are
guarded by a lock.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Hashable, List

from ..exceptions import AnnotationConflictError

__all__ = [
    "AnnotationStore",
    "LOCAL_DIMENSIONALITY",
    "STRONG_EIGENVECTOR_MATRIX",
    "NEIGHBORS",
    "LOCAL_PCA",
    "OUTLIER_SCORE",
]

LOCAL_DIMENSIONALITY = "correlation-dimensionality"
STRONG_EIGENVECTOR_MATRIX = "strong-eigenvector-matrix"
NEIGHBORS = "neighbor-list"
LOCAL_PCA = "local-pca"
OUTLIER_SCORE = "outlier-score"

_MISSING = object()


class AnnotationStore:
    def __init__(self):
        self._data: Dict[Hashable, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def put(self, point_id: Hashable, key: str, value: Any) -> None:
        with self._lock:
            slot = self._data.setdefault(point_id, {})
            if key in slot:
                raise AnnotationConflictError(f"Annotation {key!r} of object {point_id!r} is already set.")
            slot[key] = value

    def put_many(self, point_id: Hashable, values: Dict[str, Any]) -> None:
        """Write several keys of one point atomically (all or none)."""
        with self._lock:
            slot = self._data.get(point_id, {})
            clash = [k for k in values if k in slot]
            if clash:
                raise AnnotationConflictError(f"Annotations {clash!r} of object {point_id!r} are already set.")
            self._data.setdefault(point_id, {}).update(values)

    def put_all(self, key: str, values: Dict[Hashable, Any]) -> None:
        """Write one key for several points atomically (all or none)."""
        with self._lock:
            clash = [pid for pid in values if key in self._data.get(pid, {})]
            if clash:
                raise AnnotationConflictError(f"Annotation {key!r} is already set for objects {clash!r}.")
            for pid, value in values.items():
                self._data.setdefault(pid, {})[key] = value

    def get(self, point_id: Hashable, key: str, default: Any = _MISSING) -> Any:
        with self._lock:
            slot = self._data.get(point_id)
            if slot is not None and key in slot:
                return slot[key]
        if default is _MISSING:
            raise KeyError(f"No annotation {key!r} for object {point_id!r}")
        return default

    def has(self, point_id: Hashable, key: str) -> bool:
        with self._lock:
            return key in self._data.get(point_id, {})

    def keys_for(self, point_id: Hashable) -> List[str]:
        with self._lock:
            return list(self._data.get(point_id, {}))

    def ids_for(self, key: str) -> List[Hashable]:
        with self._lock:
            return [pid for pid, slot in self._data.items() if key in slot]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"AnnotationStore(n_objects={len(self)})"
