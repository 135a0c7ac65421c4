import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from . import register_filter
from .base import EigenPairFilter
from ..eigenpairs import FilteredEigenPairs, SortedEigenPairs
from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DELTA = 0.01


@register_filter('limit')
@dataclass
class LimitEigenPairFilter(EigenPairFilter):
    """
    Marks every eigenpair whose (absolute) eigenvalue is below a threshold as
    weak, all others as strong.

    Threshold:
        absolute=False:  limit = delta * max_i |lambda_i|,  0 <= delta <= 1
        absolute=True:   limit = delta,                     delta >= 0 (required)

    A pair is strong iff |lambda| >= limit, so ties go to the strong side.
    With `signed=True` the raw eigenvalue is compared instead of its
    magnitude; `LimitEigenPairFilter(0.0, absolute=True, signed=True)` drops
    the negative eigenvalues produced by round-off in the decomposition.

    In relative mode, a spectrum whose largest magnitude is exactly zero has
    no dominant direction and every pair is weak.
    """

    delta: Optional[float] = None
    absolute: bool = False
    signed: bool = False

    delta_: float = field(default=DEFAULT_DELTA, init=False, repr=False)

    def __post_init__(self):
        if self.delta is None:
            if self.absolute:
                raise ConfigurationError(
                    "Illegal parameter setting: absolute is set, but no value for delta is specified."
                )
            self.delta_ = DEFAULT_DELTA
        else:
            self.delta_ = float(self.delta)
        if not np.isfinite(self.delta_) or self.delta_ < 0:
            raise ConfigurationError(f"delta must be a finite value >= 0; got {self.delta_}")
        if not self.absolute and self.delta_ > 1:
            raise ConfigurationError(f"relative delta must lie in [0, 1]; got {self.delta_}")

    def limit(self, eigenpairs: SortedEigenPairs) -> float:
        if self.absolute:
            return self.delta_
        values = eigenpairs.eigenvalues()
        vmax = float(np.max(np.abs(values))) if values.size > 0 else 0.0
        return self.delta_ * vmax

    def filter(self, eigenpairs: SortedEigenPairs) -> FilteredEigenPairs:
        if len(eigenpairs) == 0:
            return FilteredEigenPairs([], [], dim=eigenpairs.dim)

        limit = self.limit(eigenpairs)
        # relative mode on an all-zero spectrum
        no_variance = not self.absolute and limit == 0.0 and not np.any(eigenpairs.eigenvalues())

        strong, weak = [], []
        for pair in eigenpairs:
            value = pair.eigenvalue if self.signed else abs(pair.eigenvalue)
            if not no_variance and value >= limit:
                strong.append(pair)
            else:
                weak.append(pair)

        logger.debug(
            "delta=%s absolute=%s limit=%.6g strong=%d weak=%d",
            self.delta_, self.absolute, limit, len(strong), len(weak),
        )
        return FilteredEigenPairs(strong, weak, dim=eigenpairs.dim)
