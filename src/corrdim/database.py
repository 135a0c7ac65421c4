"""
In-memory object database.

A `Database` is a fixed-size collection of objects addressed by stable ids.
Objects are either
  - rows of a real (N, d) matrix (a *vector database*), or
  - `MultiRepresentedObject`s, each carrying several alternative encodings
    of the same underlying entity (e.g. raw attributes and a transformed
    feature vector).

The stored data is copied and frozen: analyses assume points do not change
while they run.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, Iterator, List, Optional, Sequence, Union

import numpy as np

from .exceptions import ConfigurationError

__all__ = ["Database", "MultiRepresentedObject"]


class MultiRepresentedObject:
    """An object available in several representations."""

    __slots__ = ("representations",)

    def __init__(self, representations: Sequence[Any]):
        reps = tuple(
            _freeze(np.asarray(r, dtype=np.float64)) if _is_numeric(r) else r
            for r in representations
        )
        if len(reps) == 0:
            raise ConfigurationError("A multi-represented object needs at least one representation.")
        self.representations = reps

    def get_representation(self, index: int) -> Any:
        return self.representations[index]

    def __len__(self) -> int:
        return len(self.representations)

    def __repr__(self) -> str:
        return f"MultiRepresentedObject(n_representations={len(self.representations)})"


def _is_numeric(x) -> bool:
    if isinstance(x, np.ndarray):
        return x.dtype != object
    if isinstance(x, (list, tuple)):
        return all(isinstance(v, (int, float, np.integer, np.floating)) for v in x)
    return False


def _freeze(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=a.dtype, copy=True)
    a.setflags(write=False)
    return a


class Database:
    """
    Read-only collection of objects keyed by ids.

    Parameters
    ----------
    data : (N, d) array-like or sequence of MultiRepresentedObject
    ids : optional sequence of N unique hashable ids (default: 0..N-1)
    labels : optional sequence of N class labels
    """

    def __init__(
        self,
        data: Union[np.ndarray, Sequence[MultiRepresentedObject]],
        ids: Optional[Sequence[Hashable]] = None,
        labels: Optional[Sequence[Any]] = None,
    ):
        if len(data) > 0 and isinstance(data[0], MultiRepresentedObject):
            if not all(isinstance(o, MultiRepresentedObject) for o in data):
                raise ConfigurationError("Cannot mix vectors and multi-represented objects.")
            self._objects: Optional[List[MultiRepresentedObject]] = list(data)
            self._X: Optional[np.ndarray] = None
            n = len(self._objects)
        else:
            X = np.asarray(data, dtype=np.float64)
            if X.ndim != 2:
                raise ConfigurationError(f"Vector data must be (N, d); got shape={X.shape}")
            self._X = _freeze(X)
            self._objects = None
            n = X.shape[0]

        if ids is None:
            ids = list(range(n))
        else:
            ids = list(ids)
        if len(ids) != n:
            raise ConfigurationError(f"Got {len(ids)} ids for {n} objects.")
        self._index: Dict[Hashable, int] = {pid: i for i, pid in enumerate(ids)}
        if len(self._index) != n:
            raise ConfigurationError("Object ids must be unique.")
        self._ids = tuple(ids)

        if labels is not None:
            labels = list(labels)
            if len(labels) != n:
                raise ConfigurationError(f"Got {len(labels)} labels for {n} objects.")
        self._labels = labels

    # ------------------------------------------------------------------ basic
    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._ids)

    def __contains__(self, point_id) -> bool:
        return point_id in self._index

    @property
    def ids(self) -> tuple:
        return self._ids

    @property
    def is_vector(self) -> bool:
        return self._X is not None

    @property
    def dimensionality(self) -> int:
        if self._X is None:
            raise TypeError("dimensionality is only defined for vector databases.")
        return self._X.shape[1]

    @property
    def matrix(self) -> np.ndarray:
        """The frozen (N, d) data matrix, rows in id order."""
        if self._X is None:
            raise TypeError("matrix is only defined for vector databases.")
        return self._X

    def index_of(self, point_id) -> int:
        try:
            return self._index[point_id]
        except KeyError:
            raise KeyError(f"Unknown object id: {point_id!r}") from None

    def get(self, point_id):
        i = self.index_of(point_id)
        if self._X is not None:
            return self._X[i]
        return self._objects[i]

    # ---------------------------------------------------------------- vectors
    def vectors(self, point_ids: Sequence[Hashable], representation: Optional[int] = None) -> np.ndarray:
        """
        Stack the vectors of `point_ids` into an (n, d) matrix.

        On a multi-represented database `representation` selects the
        (numeric) representation to stack; a vector database has the single
        representation 0.
        """
        rows = [self.index_of(pid) for pid in point_ids]
        if self._X is not None:
            if representation not in (None, 0):
                raise IndexError(f"A vector database has no representation {representation}")
            return self._X[np.asarray(rows, dtype=int)].reshape(len(rows), self._X.shape[1])

        if representation is None:
            raise TypeError("A multi-represented database needs a representation index for vectors().")
        reps = [np.asarray(self._objects[i].get_representation(representation), dtype=np.float64) for i in rows]
        if not reps:
            return np.zeros((0, 0), dtype=np.float64)
        return np.vstack([r.reshape(1, -1) for r in reps])

    def column(self, attribute: int, representation: Optional[int] = None) -> np.ndarray:
        X = self._X if self._X is not None else self.vectors(self._ids, representation=representation)
        if representation not in (None, 0) and self._X is not None:
            raise IndexError(f"A vector database has no representation {representation}")
        if not 0 <= attribute < X.shape[1]:
            raise IndexError(f"Attribute {attribute} out of range for dimensionality {X.shape[1]}")
        return X[:, attribute]

    # ----------------------------------------------------------------- labels
    @property
    def labels(self) -> Optional[List[Any]]:
        return None if self._labels is None else list(self._labels)

    def label(self, point_id):
        if self._labels is None:
            raise KeyError("Database has no labels.")
        return self._labels[self.index_of(point_id)]

    def __repr__(self) -> str:
        kind = f"vector, d={self._X.shape[1]}" if self._X is not None else "multi-represented"
        return f"Database(n={len(self)}, {kind})"
