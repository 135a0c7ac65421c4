from .exceptions import (
    CorrDimError,
    ConfigurationError,
    DegenerateNeighborhoodError,
    SingularCovarianceError,
    InvalidStateError,
    AnnotationConflictError,
    NeighborhoodTimeoutError,
)
from .database import Database, MultiRepresentedObject
from .pca import (
    EigenPair,
    SortedEigenPairs,
    FilteredEigenPairs,
    LocalPCA,
    LocalPCAResult,
    LimitEigenPairFilter,
    NormalizingEigenPairFilter,
    PercentageEigenPairFilter,
    CompositeEigenPairFilter,
)
# distances before neighbors/preprocessing: the registry must exist first
from .distances import (
    EuclideanDistance,
    ManhattanDistance,
    KernelFunction,
    KernelDistance,
    RepresentationSelectingDistance,
    LocallyWeightedDistance,
)
from .preprocessing import AnnotationStore, LocalPCAPreprocessor, PreprocessingReport
from .neighbors import RangeNeighborhood, KNNNeighborhood, PrecomputedNeighborhood
from .outlier import CovarianceOutlierScorer, OutlierResult, OutlierScoreMeta
from .classifier import KNNClassifier
from .config import PCAConfig, PreprocessingConfig, OutlierConfig, RepresentationConfig

__all__ = [
    "CorrDimError",
    "ConfigurationError",
    "DegenerateNeighborhoodError",
    "SingularCovarianceError",
    "InvalidStateError",
    "AnnotationConflictError",
    "NeighborhoodTimeoutError",
    "Database",
    "MultiRepresentedObject",
    "EigenPair",
    "SortedEigenPairs",
    "FilteredEigenPairs",
    "LocalPCA",
    "LocalPCAResult",
    "LimitEigenPairFilter",
    "NormalizingEigenPairFilter",
    "PercentageEigenPairFilter",
    "CompositeEigenPairFilter",
    "EuclideanDistance",
    "ManhattanDistance",
    "KernelFunction",
    "KernelDistance",
    "RepresentationSelectingDistance",
    "LocallyWeightedDistance",
    "AnnotationStore",
    "LocalPCAPreprocessor",
    "PreprocessingReport",
    "RangeNeighborhood",
    "KNNNeighborhood",
    "PrecomputedNeighborhood",
    "CovarianceOutlierScorer",
    "OutlierResult",
    "OutlierScoreMeta",
    "KNNClassifier",
    "PCAConfig",
    "PreprocessingConfig",
    "OutlierConfig",
    "RepresentationConfig",
]

__version__ = "0.1.0"
