"""
Eigenpair containers.

  - EigenPair:          one (eigenvalue, eigenvector) pair, immutable.
  - SortedEigenPairs:   all pairs of a decomposition, ordered by descending
                        |eigenvalue| (stable, so equal magnitudes keep the
                        decomposition's order).
  - FilteredEigenPairs: a partition of sorted pairs into strong and weak
                        lists, both in input order.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np

__all__ = ["EigenPair", "SortedEigenPairs", "FilteredEigenPairs"]


class EigenPair:
    __slots__ = ("eigenvalue", "eigenvector")

    def __init__(self, eigenvalue: float, eigenvector: np.ndarray):
        v = np.array(eigenvector, dtype=np.float64, copy=True).reshape(-1)
        v.setflags(write=False)
        self.eigenvalue = float(eigenvalue)
        self.eigenvector = v

    @property
    def dim(self) -> int:
        return self.eigenvector.shape[0]

    def __eq__(self, other) -> bool:
        if not isinstance(other, EigenPair):
            return NotImplemented
        return self.eigenvalue == other.eigenvalue and np.array_equal(self.eigenvector, other.eigenvector)

    def __hash__(self) -> int:
        return hash((self.eigenvalue, self.eigenvector.tobytes()))

    def __repr__(self) -> str:
        return f"EigenPair({self.eigenvalue:.6g}, {np.array2string(self.eigenvector, precision=4)})"


def _columns(pairs: Sequence[EigenPair], dim: Optional[int]) -> np.ndarray:
    # (d, k) matrix of eigenvectors as columns; (d, 0) when empty
    if len(pairs) == 0:
        return np.zeros((dim or 0, 0), dtype=np.float64)
    return np.column_stack([p.eigenvector for p in pairs])


class SortedEigenPairs:
    """Eigenpairs sorted by descending absolute eigenvalue."""

    def __init__(self, pairs: Iterable[EigenPair], *, presorted: bool = False, dim: Optional[int] = None):
        pairs = list(pairs)
        if not presorted:
            # Python's sort is stable
            pairs.sort(key=lambda p: -abs(p.eigenvalue))
        self._pairs: List[EigenPair] = pairs
        self._dim = pairs[0].dim if pairs else dim

    @classmethod
    def from_decomposition(cls, eigenvalues: np.ndarray, eigenvectors: np.ndarray) -> "SortedEigenPairs":
        """
        Build from eigh-style output: eigenvalues (d,), eigenvectors (d, d)
        whose *columns* are the eigenvectors.
        """
        w = np.asarray(eigenvalues, dtype=np.float64).reshape(-1)
        V = np.asarray(eigenvectors, dtype=np.float64)
        if V.ndim != 2 or V.shape[1] != w.shape[0]:
            raise ValueError(f"eigenvectors must be (d, {w.shape[0]}); got shape={V.shape}")
        order = np.argsort(-np.abs(w), kind="stable")
        return cls((EigenPair(w[j], V[:, j]) for j in order), presorted=True, dim=V.shape[0])

    @property
    def dim(self) -> Optional[int]:
        return self._dim

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[EigenPair]:
        return iter(self._pairs)

    def __getitem__(self, i: int) -> EigenPair:
        return self._pairs[i]

    def eigenvalues(self) -> np.ndarray:
        return np.array([p.eigenvalue for p in self._pairs], dtype=np.float64)

    def eigenvectors(self) -> np.ndarray:
        return _columns(self._pairs, self._dim)

    def __repr__(self) -> str:
        return f"SortedEigenPairs({self.eigenvalues()!r})"


class FilteredEigenPairs:
    """Partition of eigenpairs into strong (dominant variance) and weak ones."""

    def __init__(
        self,
        strong: Iterable[EigenPair],
        weak: Iterable[EigenPair],
        dim: Optional[int] = None,
    ):
        self.strong: List[EigenPair] = list(strong)
        self.weak: List[EigenPair] = list(weak)
        if dim is None:
            first = self.strong[:1] or self.weak[:1]
            dim = first[0].dim if first else None
        self.dim = dim

    def strong_eigenvalues(self) -> np.ndarray:
        return np.array([p.eigenvalue for p in self.strong], dtype=np.float64)

    def weak_eigenvalues(self) -> np.ndarray:
        return np.array([p.eigenvalue for p in self.weak], dtype=np.float64)

    def strong_eigenvectors(self) -> np.ndarray:
        return _columns(self.strong, self.dim)

    def weak_eigenvectors(self) -> np.ndarray:
        return _columns(self.weak, self.dim)

    def strong_pairs(self) -> SortedEigenPairs:
        """Strong pairs as a sorted collection, ready for another filter."""
        return SortedEigenPairs(self.strong, presorted=True, dim=self.dim)

    def __repr__(self) -> str:
        return f"FilteredEigenPairs(strong={self.strong_eigenvalues()!r}, weak={self.weak_eigenvalues()!r})"


EigenPairsLike = Union[SortedEigenPairs, Sequence[EigenPair]]
