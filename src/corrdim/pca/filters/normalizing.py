from dataclasses import dataclass

import numpy as np

from . import register_filter
from .base import EigenPairFilter
from ..eigenpairs import EigenPair, FilteredEigenPairs, SortedEigenPairs


@register_filter('normalizing')
@dataclass
class NormalizingEigenPairFilter(EigenPairFilter):
    """
    Rescales each eigenvector so that lambda * <v, v> == 1 and marks every
    pair as strong.

    Pairs with a non-positive eigenvalue cannot be rescaled this way and are
    passed through unchanged; run a signed limit filter first to remove them.
    """

    def filter(self, eigenpairs: SortedEigenPairs) -> FilteredEigenPairs:
        strong = [self._normalize(p) for p in eigenpairs]
        return FilteredEigenPairs(strong, [], dim=eigenpairs.dim)

    @staticmethod
    def _normalize(pair: EigenPair) -> EigenPair:
        if pair.eigenvalue <= 0.0:
            return pair
        length = float(np.linalg.norm(pair.eigenvector))
        if length == 0.0:
            return pair
        scaling = 1.0 / (np.sqrt(pair.eigenvalue) * length)
        return EigenPair(pair.eigenvalue, pair.eigenvector * scaling)
