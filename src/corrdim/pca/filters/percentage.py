from dataclasses import dataclass

import numpy as np

from . import register_filter
from .base import EigenPairFilter
from ..eigenpairs import FilteredEigenPairs, SortedEigenPairs
from ...exceptions import ConfigurationError

DEFAULT_ALPHA = 0.85


@register_filter('percentage')
@dataclass
class PercentageEigenPairFilter(EigenPairFilter):
    """
    Marks the leading eigenpairs as strong until they explain at least
    `alpha` of the total |lambda|; the remaining pairs are weak.
    """

    alpha: float = DEFAULT_ALPHA

    def __post_init__(self):
        if not 0.0 < self.alpha <= 1.0:
            raise ConfigurationError(f"alpha must lie in (0, 1]; got {self.alpha}")

    def filter(self, eigenpairs: SortedEigenPairs) -> FilteredEigenPairs:
        magnitudes = np.abs(eigenpairs.eigenvalues())
        total = float(magnitudes.sum())
        if total == 0.0:
            return FilteredEigenPairs([], list(eigenpairs), dim=eigenpairs.dim)

        explained = np.cumsum(magnitudes) / total
        # number of leading pairs needed to reach alpha
        n_strong = int(np.searchsorted(explained, self.alpha - 1e-12) + 1)
        n_strong = min(n_strong, len(eigenpairs))
        pairs = list(eigenpairs)
        return FilteredEigenPairs(pairs[:n_strong], pairs[n_strong:], dim=eigenpairs.dim)
