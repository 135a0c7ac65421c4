"""
Validated configuration records.

Each record checks its fields on construction, can be built from a plain
dict (`from_dict`, unknown keys rejected) and turns itself into the
component it configures (`build`).

    PCAConfig            -> LocalPCA
    PreprocessingConfig  -> LocalPCAPreprocessor
    OutlierConfig        -> CovarianceOutlierScorer
    RepresentationConfig -> RepresentationSelectingDistance
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .distances import get_distance
from .distances.base import DistanceFunction
from .distances.representation import RepresentationSelectingDistance
from .exceptions import ConfigurationError
from .neighbors import KNNNeighborhood, RangeNeighborhood
from .outlier.covariance import CovarianceOutlierScorer
from .pca.filters.limit import LimitEigenPairFilter
from .pca.runner import LocalPCA
from .preprocessing.local_pca import LocalPCAPreprocessor

__all__ = ["PCAConfig", "PreprocessingConfig", "OutlierConfig", "RepresentationConfig"]


class _FromDict:
    @classmethod
    def from_dict(cls, values: Mapping[str, Any]):
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown {cls.__name__} keys: {unknown}")
        return cls(**dict(values))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _make_distance(name: str, params: Mapping[str, Any]) -> DistanceFunction:
    try:
        factory = get_distance(name)
    except ValueError as e:
        raise ConfigurationError(str(e)) from None
    return factory(**dict(params))


@dataclass
class PCAConfig(_FromDict):
    delta: Optional[float] = None
    absolute: bool = False
    normalize: bool = True
    big: float = 1.0
    small: float = 0.0
    backend: str = "auto"
    representation: Optional[int] = None

    def __post_init__(self):
        # fail at setup, not on the first analyzed neighborhood
        LimitEigenPairFilter(delta=self.delta, absolute=self.absolute)

    def build(self) -> LocalPCA:
        return LocalPCA(
            delta=self.delta,
            absolute=self.absolute,
            normalize=self.normalize,
            big=self.big,
            small=self.small,
            backend=self.backend,
            representation=self.representation,
        )


@dataclass
class PreprocessingConfig(_FromDict):
    epsilon: Optional[float] = None
    k: Optional[int] = None
    distance: str = "euclidean"
    distance_params: Dict[str, Any] = field(default_factory=dict)
    pca: PCAConfig = field(default_factory=PCAConfig)
    n_jobs: int = 1
    query_timeout: Optional[float] = None
    max_retries: int = 0
    representation: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.pca, Mapping):
            self.pca = PCAConfig.from_dict(self.pca)
        if (self.epsilon is None) == (self.k is None):
            raise ConfigurationError("Specify exactly one of epsilon (range query) or k (kNN query).")
        if self.representation is not None and self.representation < 0:
            raise ConfigurationError(f"representation must be >= 0; got {self.representation}")

    def build(self, database) -> LocalPCAPreprocessor:
        """
        With `representation` set, neighborhoods and local PCAs both run on
        that representation of multi-represented objects; the configured
        distance becomes the shared default of a representation-selecting
        distance bound to it.
        """
        distance = _make_distance(self.distance, self.distance_params)
        pca = self.pca
        if self.representation is not None:
            if not isinstance(distance, RepresentationSelectingDistance):
                distance = RepresentationSelectingDistance(default=distance)
            distance = distance.bind(self.representation)
            pca = replace(pca, representation=self.representation)
        if self.epsilon is not None:
            neighborhood = RangeNeighborhood(database, distance, epsilon=self.epsilon)
        else:
            neighborhood = KNNNeighborhood(database, distance, k=self.k)
        return LocalPCAPreprocessor(
            neighborhood=neighborhood,
            pca=pca.build(),
            n_jobs=self.n_jobs,
            query_timeout=self.query_timeout,
            max_retries=self.max_retries,
        )


@dataclass
class OutlierConfig(_FromDict):
    attributes: Sequence[int] = field(default_factory=list)
    singular: str = "raise"
    n_jobs: int = 1

    def __post_init__(self):
        self.attributes = list(self.attributes)
        if len(self.attributes) == 0:
            raise ConfigurationError("At least one attribute is required for outlier scoring.")
        if self.singular not in ("raise", "pinv"):
            raise ConfigurationError(f"Unknown singular covariance policy: {self.singular}")

    def build(self, neighborhood) -> CovarianceOutlierScorer:
        return CovarianceOutlierScorer(
            attributes=self.attributes,
            neighborhood=neighborhood,
            singular=self.singular,
            n_jobs=self.n_jobs,
        )


@dataclass
class RepresentationConfig(_FromDict):
    """Distance names per representation, and/or a shared default name."""

    distances: Optional[List[str]] = None
    default: Optional[str] = None

    def __post_init__(self):
        if self.distances is not None and len(self.distances) == 0:
            raise ConfigurationError("No distance functions specified.")

    def build(self) -> RepresentationSelectingDistance:
        distances = None
        if self.distances is not None:
            distances = [_make_distance(name, {}) for name in self.distances]
        default = _make_distance(self.default, {}) if self.default is not None else None
        return RepresentationSelectingDistance(distances=distances, default=default)
