"""
Local PCA runner.

This module provides the `LocalPCA` class that, for one neighborhood:
  - gathers the neighbors' attribute vectors,
  - estimates their covariance matrix (maximum-likelihood estimate, i.e.
    divided by N, not N-1),
  - eigen-decomposes it (symmetric solver) and sorts the eigenpairs by
    descending |eigenvalue|,
  - splits the eigenpairs into strong and weak ones through a filter chain,
  - packages the result as a `LocalPCAResult`: correlation dimensionality,
    strong eigenvector basis and the matrices needed for locally weighted
    distances.

Default filter chain
--------------------
  1) signed absolute limit 0.0   -> drops negative round-off eigenvalues
  2) normalizing                 -> lambda * <v, v> == 1 for the survivors
  3) limit(delta, absolute)      -> final strong / weak split

PyTorch compatibility
------------------------------
- `backend='auto'` (default) uses NumPy unless the input matrix is a
  torch.Tensor, in which case the decomposition runs in torch.
- You can force a backend with backend='numpy' or backend='torch'.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Literal, Optional, Sequence, Tuple

import numpy as np
from sklearn.covariance import EmpiricalCovariance

from .eigenpairs import FilteredEigenPairs, SortedEigenPairs
from .filters import (
    CompositeEigenPairFilter,
    EigenPairFilter,
    LimitEigenPairFilter,
    NormalizingEigenPairFilter,
)
from ..exceptions import ConfigurationError, DegenerateNeighborhoodError

logger = logging.getLogger(__name__)

Backend = Literal["auto", "numpy", "torch"]

__all__ = ["LocalPCA", "LocalPCAResult", "covariance_matrix"]


# ---------------------------------------------------------------------------
# Backend detection (lazy torch import)
# ---------------------------------------------------------------------------

def _maybe_import_torch():
    try:
        import torch  # type: ignore
        return torch
    except Exception:
        return None


def _is_torch_tensor(x) -> bool:
    return x.__class__.__module__.startswith("torch") and hasattr(x, "dtype") and hasattr(x, "device")


def _choose_backend(backend: Backend, *, X=None) -> Literal["numpy", "torch"]:
    if backend == "numpy":
        return "numpy"
    if backend == "torch":
        torch = _maybe_import_torch()
        if torch is None:
            raise RuntimeError("backend='torch' requested but PyTorch is not available.")
        return "torch"
    # backend == "auto"
    if X is not None and _is_torch_tensor(X):
        torch = _maybe_import_torch()
        if torch is not None:
            return "torch"
    return "numpy"


def _to_numpy(x) -> np.ndarray:
    if isinstance(x, np.ndarray):
        return x
    if _is_torch_tensor(x):
        return x.detach().cpu().numpy()
    return np.asarray(x)


# ---------------------------------------------------------------------------
# Covariance
# ---------------------------------------------------------------------------

def covariance_matrix(X: np.ndarray) -> np.ndarray:
    """
    Covariance of the rows of X, divided by N.

    Identical rows (in particular a single row) give the exact zero matrix.
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"X must be (n, d); got shape={X.shape}")
    if X.shape[0] == 0:
        raise DegenerateNeighborhoodError("Cannot estimate a covariance matrix from zero points.")
    if np.all(X == X[0]):
        # centering would leave round-off residue behind
        return np.zeros((X.shape[1], X.shape[1]), dtype=np.float64)
    return EmpiricalCovariance(store_precision=False, assume_centered=False).fit(X).covariance_


def _unit_columns(V: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(V, axis=0)
    return V / np.where(norms > 0, norms, 1.0)


@dataclass(frozen=True)
class LocalPCAResult:
    """
    Outcome of one local PCA.

    Attributes
    ----------
    correlation_dimensionality : number of strong eigenpairs
    strong_eigenvectors : (d, k) strong eigenvectors as columns, filter order
    eigenvalues : (d,) all eigenvalues, descending |lambda|
    eigenvectors : (d, d) matching unit eigenvectors as columns
    filtered : the strong / weak partition returned by the filter
    similarity_matrix : (d, d), weight `small` on the strong, `big` on the weak directions
    dissimilarity_matrix : (d, d), weight `big` on the strong, `small` on the weak directions
    adapted_strong_eigenvectors : unit strong eigenvectors scaled by `big`, (d, k)
    explained_variance : strong share of sum |lambda| (0 when there is no variance)
    n_neighbors : size of the analyzed neighborhood
    """

    correlation_dimensionality: int
    strong_eigenvectors: np.ndarray
    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    filtered: FilteredEigenPairs = field(repr=False)
    similarity_matrix: np.ndarray = field(repr=False)
    dissimilarity_matrix: np.ndarray = field(repr=False)
    adapted_strong_eigenvectors: np.ndarray = field(repr=False)
    explained_variance: float = 0.0
    n_neighbors: int = 0

    @property
    def dim(self) -> int:
        return self.eigenvectors.shape[0]

    def project(self, X: np.ndarray) -> np.ndarray:
        """Coordinates of X (n, d) in the strong subspace, (n, k)."""
        return np.asarray(X, dtype=np.float64) @ self.strong_eigenvectors


@dataclass
class LocalPCA:
    """
    PCA on a local neighborhood with strong/weak eigenpair filtering.

    - .analyze(ids, database) runs on the vectors of the given neighbor ids.
    - .analyze_matrix(X) runs on an explicit (n, d) neighborhood matrix.
    """

    # Final strong / weak split
    delta: Optional[float] = None
    absolute: bool = False

    # Rescale surviving eigenvectors before the final split
    normalize: bool = True

    # Weights for the similarity / dissimilarity matrices
    big: float = 1.0
    small: float = 0.0

    # Eigenvalues with |lambda| < eig_rel * max|lambda| are treated as exactly
    # zero (round-off); None means d * machine epsilon
    eig_rel: Optional[float] = None

    backend: Backend = "auto"

    # Representation analyzed on a multi-represented database
    representation: Optional[int] = None

    # Replaces the default chain when given
    eigenpair_filter: Optional[EigenPairFilter] = None

    filter_: EigenPairFilter = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.eig_rel is not None and not 0.0 <= self.eig_rel < 1.0:
            raise ConfigurationError(f"eig_rel must lie in [0, 1); got {self.eig_rel}")
        if self.representation is not None and self.representation < 0:
            raise ConfigurationError(f"representation must be >= 0; got {self.representation}")
        if self.backend not in ("auto", "numpy", "torch"):
            raise ConfigurationError(f"Unknown backend: {self.backend}")
        self.filter_ = self.eigenpair_filter if self.eigenpair_filter is not None else self.build_filter()

    def build_filter(self) -> EigenPairFilter:
        stages = [LimitEigenPairFilter(delta=0.0, absolute=True, signed=True)]
        if self.normalize:
            stages.append(NormalizingEigenPairFilter())
        stages.append(LimitEigenPairFilter(delta=self.delta, absolute=self.absolute))
        return CompositeEigenPairFilter(stages)

    # =========================
    # Core analysis
    # =========================
    def analyze(self, neighbor_ids: Sequence[Hashable], database) -> LocalPCAResult:
        """
        Run the local PCA on the vectors of `neighbor_ids` in `database`.

        Raises
        ------
        DegenerateNeighborhoodError
            If `neighbor_ids` is empty.
        """
        neighbor_ids = list(neighbor_ids)
        if len(neighbor_ids) == 0:
            raise DegenerateNeighborhoodError("Cannot run a local PCA on an empty neighborhood.")
        return self.analyze_matrix(database.vectors(neighbor_ids, representation=self.representation))

    def analyze_matrix(self, X) -> LocalPCAResult:
        n = X.shape[0] if hasattr(X, "shape") else len(X)
        if n == 0:
            raise DegenerateNeighborhoodError("Cannot run a local PCA on an empty neighborhood.")

        eigenvalues, eigenvectors = self.decompose(X)
        eigenpairs = SortedEigenPairs.from_decomposition(eigenvalues, eigenvectors)
        filtered = self.filter_.filter(eigenpairs)
        return self._package(eigenpairs, filtered, n)

    def decompose(self, X) -> Tuple[np.ndarray, np.ndarray]:
        """Eigenvalues (d,) and column eigenvectors (d, d) of the covariance of X."""
        bk = _choose_backend(self.backend, X=X)

        if bk == "numpy":
            C = covariance_matrix(_to_numpy(X))
            w, V = np.linalg.eigh(C)
        else:
            torch = _maybe_import_torch()
            if torch is None:
                raise RuntimeError("Torch backend selected but PyTorch is not installed.")
            Xt = X if isinstance(X, torch.Tensor) else torch.as_tensor(np.asarray(X, dtype=np.float64))
            Xt = Xt.to(dtype=torch.float64)
            # same divide-by-N convention as the numpy path
            if bool(torch.all(Xt == Xt[0])):
                C = torch.zeros((Xt.shape[1], Xt.shape[1]), dtype=torch.float64, device=Xt.device)
            else:
                Xc = Xt - Xt.mean(dim=0, keepdim=True)
                C = (Xc.T @ Xc) / Xt.shape[0]
            w_t, V_t = torch.linalg.eigh(C)
            w, V = _to_numpy(w_t), _to_numpy(V_t)

        w = np.array(w, dtype=np.float64)
        if w.size > 0:
            rel = self.eig_rel if self.eig_rel is not None else w.size * np.finfo(np.float64).eps
            w[np.abs(w) < rel * np.max(np.abs(w))] = 0.0
        return w, np.asarray(V, dtype=np.float64)

    def _package(self, eigenpairs: SortedEigenPairs, filtered: FilteredEigenPairs, n: int) -> LocalPCAResult:
        V = eigenpairs.eigenvectors()  # (d, d)
        values = eigenpairs.eigenvalues()
        d = V.shape[0]
        k = len(filtered.strong)

        # weights follow the filter's partition, not the position in the sorted
        # basis: a filter may keep a later pair and drop an earlier one
        S = _unit_columns(filtered.strong_eigenvectors())
        W = _unit_columns(filtered.weak_eigenvectors())
        similarity = self.small * (S @ S.T) + self.big * (W @ W.T)
        dissimilarity = self.big * (S @ S.T) + self.small * (W @ W.T)
        adapted = self.big * S

        total = float(np.abs(values).sum())
        strong_total = float(np.abs(filtered.strong_eigenvalues()).sum())
        explained = strong_total / total if total > 0 else 0.0

        logger.debug("local PCA over %d points: correlation dimensionality %d of %d", n, k, d)
        return LocalPCAResult(
            correlation_dimensionality=k,
            strong_eigenvectors=filtered.strong_eigenvectors(),
            eigenvalues=values,
            eigenvectors=V,
            filtered=filtered,
            similarity_matrix=similarity,
            dissimilarity_matrix=dissimilarity,
            adapted_strong_eigenvectors=adapted,
            explained_variance=explained,
            n_neighbors=n,
        )
