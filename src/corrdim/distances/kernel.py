"""
Kernel functions and kernel-induced distances.

A kernel k(x, y) is an inner product in some feature space phi. The distance
between the images of x and y in that space is

    d(x, y) = sqrt( k(x, x) - 2 k(x, y) + k(y, y) )

so neighborhoods can be computed in the kernel-transformed space without
materializing phi. The linear kernel gives back the Euclidean distance.

Kernels are evaluated with scikit-learn's `pairwise_kernels`; every name in
`sklearn.metrics.pairwise.PAIRWISE_KERNEL_FUNCTIONS` is accepted
('linear', 'poly'/'polynomial', 'rbf', 'sigmoid', 'laplacian', ...).
"""

from typing import Any, Dict, Optional, Union

import numpy as np
from sklearn.metrics.pairwise import PAIRWISE_KERNEL_FUNCTIONS, pairwise_kernels

from . import register_distance
from .base import DistanceFunction, SimilarityFunction, as_vector
from ..exceptions import ConfigurationError

__all__ = ["KernelFunction", "KernelDistance"]


class KernelFunction(SimilarityFunction):
    """
    Kernel similarity backed by scikit-learn.

    Parameters
    ----------
    kind : kernel name understood by sklearn's pairwise_kernels
    **params : forwarded to the kernel (e.g. degree, gamma, coef0)
    """

    def __init__(self, kind: str = "linear", **params: Any):
        if kind not in PAIRWISE_KERNEL_FUNCTIONS:
            raise ConfigurationError(
                f"Unknown kernel: {kind}. Available: {sorted(PAIRWISE_KERNEL_FUNCTIONS)}"
            )
        self.kind = kind
        self.params: Dict[str, Any] = params

    def similarity(self, o1, o2) -> float:
        x, y = as_vector(o1)[None, :], as_vector(o2)[None, :]
        return float(self.matrix(x, y)[0, 0])

    def matrix(self, X: np.ndarray, Y: Optional[np.ndarray] = None) -> np.ndarray:
        """Kernel matrix K[i, j] = k(X[i], Y[j])."""
        X = np.atleast_2d(np.asarray(X, dtype=np.float64))
        if Y is not None:
            Y = np.atleast_2d(np.asarray(Y, dtype=np.float64))
        return pairwise_kernels(X, Y, metric=self.kind, **self.params)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"KernelFunction({self.kind!r}{', ' + params if params else ''})"


@register_distance('kernel')
class KernelDistance(DistanceFunction):
    """Distance induced by a kernel function."""

    def __init__(self, kernel: Union[str, KernelFunction] = "linear", **params: Any):
        if isinstance(kernel, KernelFunction):
            if params:
                raise ConfigurationError("Pass kernel parameters either to KernelFunction or here, not both.")
            self.kernel = kernel
        else:
            self.kernel = KernelFunction(kernel, **params)

    def distance(self, o1, o2) -> float:
        x, y = as_vector(o1), as_vector(o2)
        if x.shape != y.shape:
            raise ValueError("o1 and o2 must have the same shape")
        K = self.kernel.matrix(np.vstack([x, y]))
        sq = K[0, 0] - 2.0 * K[0, 1] + K[1, 1]
        # round-off can push a zero distance slightly negative
        return float(np.sqrt(max(sq, 0.0)))

    def pairwise(self, X: np.ndarray) -> np.ndarray:
        """All kernel-induced distances between the rows of X, (n, n)."""
        K = self.kernel.matrix(X)
        diag = np.diag(K)
        sq = diag[:, None] - 2.0 * K + diag[None, :]
        return np.sqrt(np.clip(sq, 0.0, None))

    def __repr__(self) -> str:
        return f"KernelDistance({self.kernel!r})"
