"""
Covariance-based outlier scoring over neighborhood deviations.

For every selected attribute f and every object o the local deviation is

    h(o, f) = | f(o) - mean_{n in N(o)} f(n) |      (0 when |N(o)| <= 1)

Stacking these gives the deviation matrix H (attributes x objects). With
mu the mean deviation vector and Sigma the covariance of the deviation
vectors (divided by N), each object is scored by the quadratic form

    score(o) = (h_o - mu)^T Sigma^{-1} (h_o - mu)

i.e. its squared Mahalanobis distance in deviation space. A rank deficient
Sigma (e.g. an attribute on which every object has the same deviation) is
reported as `SingularCovarianceError` unless the pseudo-inverse fallback is
selected.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Hashable, List, Literal, Optional, Sequence

import numpy as np
from sklearn.covariance import EmpiricalCovariance

from .result import OutlierResult, OutlierScoreMeta
from ..exceptions import ConfigurationError, SingularCovarianceError
from ..preprocessing.store import OUTLIER_SCORE, AnnotationStore

logger = logging.getLogger(__name__)

SingularPolicy = Literal["raise", "pinv"]

__all__ = ["CovarianceOutlierScorer", "deviation_matrix"]


def _deviations(point_id, X: np.ndarray, database, attributes: np.ndarray, neighborhood) -> np.ndarray:
    neighbors = list(neighborhood.neighbors(point_id))
    if len(neighbors) <= 1:
        return np.zeros(attributes.shape[0], dtype=np.float64)
    rows = np.array([database.index_of(n) for n in neighbors], dtype=int)
    means = X[np.ix_(rows, attributes)].mean(axis=0)
    f = X[database.index_of(point_id), attributes]
    return np.abs(f - means)


def deviation_matrix(database, attributes: Sequence[int], neighborhood, n_jobs: int = 1) -> np.ndarray:
    """
    Per-attribute neighborhood deviations, shape (len(attributes), N),
    columns in database order.
    """
    X = database.matrix
    attrs = np.asarray(list(attributes), dtype=int)
    ids = list(database)

    if n_jobs == 1:
        columns = [_deviations(pid, X, database, attrs, neighborhood) for pid in ids]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=n_jobs, thread_name_prefix="corrdim-dev") as pool:
            columns = list(pool.map(lambda pid: _deviations(pid, X, database, attrs, neighborhood), ids))

    if not columns:
        return np.zeros((attrs.shape[0], 0), dtype=np.float64)
    return np.column_stack(columns)


@dataclass
class CovarianceOutlierScorer:
    """
    Parameters
    ----------
    attributes : attribute (column) indices to score on
    neighborhood : neighborhood source, e.g. a PrecomputedNeighborhood of spatial neighbors
    singular : 'raise' (default) or 'pinv' when the covariance is rank deficient
    n_jobs : threads used to build the deviation matrix
    """

    attributes: Sequence[int]
    neighborhood: object
    singular: SingularPolicy = "raise"
    n_jobs: int = 1

    def __post_init__(self):
        self.attributes = [int(a) for a in self.attributes]
        if len(self.attributes) == 0:
            raise ConfigurationError("At least one attribute is required for outlier scoring.")
        if any(a < 0 for a in self.attributes):
            raise ConfigurationError(f"Attribute indices must be >= 0; got {self.attributes}")
        if self.singular not in ("raise", "pinv"):
            raise ConfigurationError(f"Unknown singular covariance policy: {self.singular}")
        if int(self.n_jobs) != self.n_jobs or self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be >= 1; got {self.n_jobs}")

    def score(self, database, store: Optional[AnnotationStore] = None) -> OutlierResult:
        """
        Score every object of `database`.

        Raises
        ------
        SingularCovarianceError
            If the deviation covariance is rank deficient and singular='raise'.
        AnnotationConflictError
            If `store` already holds a score for any object; nothing is written.
        """
        d = database.dimensionality
        bad = [a for a in self.attributes if a >= d]
        if bad:
            raise ConfigurationError(f"Attributes {bad} out of range for dimensionality {d}")

        H = deviation_matrix(database, self.attributes, self.neighborhood, n_jobs=self.n_jobs)
        inv_sigma = self._inverse_covariance(H)

        centered = H - H.mean(axis=1, keepdims=True)  # (m, N)
        values = np.einsum("in,ij,jn->n", centered, inv_sigma, centered)

        ids: List[Hashable] = list(database)
        scores = {pid: float(v) for pid, v in zip(ids, values)}
        meta = OutlierScoreMeta(
            min=float(values.min()) if values.size else 0.0,
            max=float(values.max()) if values.size else 0.0,
        )

        if store is not None:
            store.put_all(OUTLIER_SCORE, scores)

        logger.info(
            "scored %d objects on attributes %s, range [%.6g, %.6g]",
            len(ids), self.attributes, meta.min, meta.max,
        )
        return OutlierResult(scores=scores, meta=meta)

    def _inverse_covariance(self, H: np.ndarray) -> np.ndarray:
        m, n = H.shape
        if n < 2:
            raise SingularCovarianceError(
                f"Need at least two objects to estimate a covariance; got {n}.", rank=0, dim=m
            )
        sigma = EmpiricalCovariance(store_precision=False, assume_centered=False).fit(H.T).covariance_
        sigma = np.atleast_2d(sigma)
        rank = int(np.linalg.matrix_rank(sigma))
        if rank < m:
            if self.singular == "raise":
                raise SingularCovarianceError(
                    f"Deviation covariance is singular (rank {rank} < {m}).", rank=rank, dim=m
                )
            logger.warning("deviation covariance is singular (rank %d < %d), using the pseudo-inverse", rank, m)
            return np.linalg.pinv(sigma, hermitian=True)
        return np.linalg.inv(sigma)
