"""
Neighborhood sources.

A neighborhood source answers `neighbors(point_id) -> list of ids` for the
objects of one database:

  - RangeNeighborhood:       all objects within distance <= epsilon.
  - KNNNeighborhood:         the k nearest objects.
  - PrecomputedNeighborhood: explicit neighbor sets (e.g. spatial adjacency).

Range and kNN queries include the query object itself and are ordered by
(distance, database order). On a vector database with the plain Euclidean
distance they are answered by scikit-learn's `NearestNeighbors`; any other
distance function (kernel, representation-selecting, ...) is evaluated by a
brute-force scan.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

import numpy as np
from sklearn.neighbors import NearestNeighbors

from .distances.base import DistanceFunction
from .distances.euclidean import EuclideanDistance
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "NeighborhoodSource",
    "RangeNeighborhood",
    "KNNNeighborhood",
    "PrecomputedNeighborhood",
]


class NeighborhoodSource(ABC):
    @abstractmethod
    def neighbors(self, point_id: Hashable) -> List[Hashable]:
        pass

    def __call__(self, point_id: Hashable) -> List[Hashable]:
        return self.neighbors(point_id)


class _QueryNeighborhood(NeighborhoodSource):
    """Shared machinery for distance-based queries over a database."""

    def __init__(self, database, distance: Optional[DistanceFunction] = None):
        self.database = database
        self.distance = distance if distance is not None else EuclideanDistance()
        self._tree: Optional[NearestNeighbors] = None
        self._lock = threading.Lock()

    @property
    def uses_tree(self) -> bool:
        return self.database.is_vector and type(self.distance) is EuclideanDistance

    def _get_tree(self) -> NearestNeighbors:
        with self._lock:
            if self._tree is None:
                self._tree = NearestNeighbors(algorithm="auto").fit(self.database.matrix)
                logger.debug("built neighbor index over %d points", len(self.database))
            return self._tree

    def _scan(self, point_id: Hashable) -> np.ndarray:
        query = self.database.get(point_id)
        return np.array(
            [self.distance.distance(query, self.database.get(other)) for other in self.database],
            dtype=np.float64,
        )

    def _as_ids(self, idx: np.ndarray, dist: np.ndarray) -> List[Hashable]:
        # stable ordering by distance, then database order
        order = np.lexsort((idx, dist))
        ids = self.database.ids
        return [ids[i] for i in idx[order]]


class RangeNeighborhood(_QueryNeighborhood):
    """All objects within `epsilon` of the query object."""

    def __init__(self, database, distance: Optional[DistanceFunction] = None, epsilon: float = 0.0):
        super().__init__(database, distance)
        if epsilon is None or not np.isfinite(epsilon) or epsilon < 0:
            raise ConfigurationError(f"epsilon must be a finite value >= 0; got {epsilon}")
        self.epsilon = float(epsilon)

    def neighbors(self, point_id: Hashable) -> List[Hashable]:
        if self.uses_tree:
            x = self.database.matrix[self.database.index_of(point_id)][None, :]
            dist, idx = self._get_tree().radius_neighbors(x, radius=self.epsilon)
            return self._as_ids(np.asarray(idx[0], dtype=int), np.asarray(dist[0]))
        dist = self._scan(point_id)
        idx = np.flatnonzero(dist <= self.epsilon)
        return self._as_ids(idx, dist[idx])

    def __repr__(self) -> str:
        return f"RangeNeighborhood(epsilon={self.epsilon}, distance={self.distance!r})"


class KNNNeighborhood(_QueryNeighborhood):
    """The `k` nearest objects (the query object counts as one of them)."""

    def __init__(self, database, distance: Optional[DistanceFunction] = None, k: int = 1):
        super().__init__(database, distance)
        if int(k) != k or k < 1:
            raise ConfigurationError(f"k must be an integer >= 1; got {k}")
        self.k = int(k)

    def neighbors(self, point_id: Hashable) -> List[Hashable]:
        k = min(self.k, len(self.database))
        if self.uses_tree:
            x = self.database.matrix[self.database.index_of(point_id)][None, :]
            tree = self._get_tree()
            dist, idx = tree.kneighbors(x, n_neighbors=k)
            # the tree picks arbitrarily among points tied with the k-th one;
            # widen to all of them so ties resolve by database order
            r_dist, r_idx = tree.radius_neighbors(x, radius=dist[0, -1])
            if len(r_idx[0]) >= k:
                dist, idx = r_dist, r_idx
            return self._as_ids(np.asarray(idx[0], dtype=int), np.asarray(dist[0]))[:k]
        dist = self._scan(point_id)
        idx = np.argsort(dist, kind="stable")[:k]
        return self._as_ids(idx, dist[idx])

    def __repr__(self) -> str:
        return f"KNNNeighborhood(k={self.k}, distance={self.distance!r})"


class PrecomputedNeighborhood(NeighborhoodSource):
    """Neighbor sets given up front; unknown ids have no neighbors."""

    def __init__(self, mapping: Mapping[Hashable, Iterable[Hashable]]):
        self.mapping: Dict[Hashable, Tuple[Hashable, ...]] = {k: tuple(v) for k, v in mapping.items()}

    def neighbors(self, point_id: Hashable) -> List[Hashable]:
        return list(self.mapping.get(point_id, ()))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Hashable, Hashable]], symmetric: bool = True) -> "PrecomputedNeighborhood":
        """Build from (a, b) adjacency pairs."""
        mapping: Dict[Hashable, List[Hashable]] = {}
        for a, b in pairs:
            mapping.setdefault(a, []).append(b)
            if symmetric:
                mapping.setdefault(b, []).append(a)
        return cls(mapping)

    def __repr__(self) -> str:
        return f"PrecomputedNeighborhood(n_objects={len(self.mapping)})"
