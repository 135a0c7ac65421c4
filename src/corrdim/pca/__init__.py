from .eigenpairs import EigenPair, SortedEigenPairs, FilteredEigenPairs
from .runner import LocalPCA, LocalPCAResult, covariance_matrix
from .filters import (
    EigenPairFilter,
    LimitEigenPairFilter,
    NormalizingEigenPairFilter,
    PercentageEigenPairFilter,
    CompositeEigenPairFilter,
    register_filter,
    get_filter,
    list_filters,
)

__all__ = [
    "EigenPair", "SortedEigenPairs", "FilteredEigenPairs",
    "LocalPCA", "LocalPCAResult", "covariance_matrix",
    "EigenPairFilter", "LimitEigenPairFilter", "NormalizingEigenPairFilter",
    "PercentageEigenPairFilter", "CompositeEigenPairFilter",
    "register_filter", "get_filter", "list_filters",
]
