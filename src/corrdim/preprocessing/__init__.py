from .store import (
    AnnotationStore,
    LOCAL_DIMENSIONALITY,
    STRONG_EIGENVECTOR_MATRIX,
    NEIGHBORS,
    LOCAL_PCA,
    OUTLIER_SCORE,
)
from .local_pca import LocalPCAPreprocessor, PreprocessingReport

__all__ = [
    "AnnotationStore",
    "LOCAL_DIMENSIONALITY",
    "STRONG_EIGENVECTOR_MATRIX",
    "NEIGHBORS",
    "LOCAL_PCA",
    "OUTLIER_SCORE",
    "LocalPCAPreprocessor",
    "PreprocessingReport",
]
