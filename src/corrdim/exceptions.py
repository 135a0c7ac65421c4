"""
Exception hierarchy.

Every error raised on purpose by the package derives from `CorrDimError`,
and additionally from the builtin it refines, so callers that only know
about `ValueError` or `RuntimeError` keep working.

  - ConfigurationError:           invalid parameters, raised at setup time.
  - DegenerateNeighborhoodError:  a local PCA was asked to run on no points.
  - SingularCovarianceError:      the outlier covariance cannot be inverted.
  - InvalidStateError:            an object was used out of contract order.
  - AnnotationConflictError:      a second write to a write-once annotation.
  - NeighborhoodTimeoutError:     a neighborhood query overran its timeout.
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "CorrDimError",
    "ConfigurationError",
    "DegenerateNeighborhoodError",
    "SingularCovarianceError",
    "InvalidStateError",
    "AnnotationConflictError",
    "NeighborhoodTimeoutError",
]


class CorrDimError(Exception):
    """Base class for all corrdim errors."""


class ConfigurationError(CorrDimError, ValueError):
    pass


class DegenerateNeighborhoodError(CorrDimError, ValueError):
    def __init__(self, message: str = "Neighborhood is empty.", point_id=None):
        super().__init__(message)
        self.point_id = point_id


class SingularCovarianceError(CorrDimError, np.linalg.LinAlgError):
    def __init__(self, message: str, rank: int, dim: int):
        super().__init__(message)
        self.rank = rank
        self.dim = dim


class InvalidStateError(CorrDimError, RuntimeError):
    pass


class AnnotationConflictError(InvalidStateError):
    pass


class NeighborhoodTimeoutError(CorrDimError, TimeoutError):
    pass
