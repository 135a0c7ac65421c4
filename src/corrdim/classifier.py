"""
k-nearest-neighbor classifier.

A lazy learner: `fit` only remembers the database and its labels; the class
distribution of an instance is the label share among its k nearest database
objects under the configured distance function (which may be a kernel,
representation-selecting or locally weighted distance).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import numpy as np

from .distances.base import DistanceFunction
from .distances.euclidean import EuclideanDistance
from .exceptions import ConfigurationError, InvalidStateError

__all__ = ["KNNClassifier"]


@dataclass
class KNNClassifier:
    distance: DistanceFunction = field(default_factory=EuclideanDistance)
    k: int = 1

    classes_: Optional[List[Any]] = field(default=None, init=False)
    database_: Any = field(default=None, init=False, repr=False)
    labels_: Optional[List[Any]] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if int(self.k) != self.k or self.k < 1:
            raise ConfigurationError(f"k must be an integer >= 1; got {self.k}")

    def fit(self, database, labels: Optional[Sequence[Any]] = None) -> "KNNClassifier":
        labels = list(labels) if labels is not None else database.labels
        if labels is None:
            raise ConfigurationError("No labels given and the database carries none.")
        if len(labels) != len(database):
            raise ConfigurationError(f"Got {len(labels)} labels for {len(database)} objects.")
        self.database_ = database
        self.labels_ = labels
        self.classes_ = sorted(set(labels))
        return self

    def class_distribution(self, instance) -> np.ndarray:
        """Share of each class in `classes_` among the k nearest neighbors."""
        if self.database_ is None:
            raise InvalidStateError("Call fit() before classifying.")
        dist = np.array(
            [self.distance.distance(instance, self.database_.get(pid)) for pid in self.database_],
            dtype=np.float64,
        )
        nearest = np.argsort(dist, kind="stable")[: min(self.k, dist.shape[0])]

        counts = np.zeros(len(self.classes_), dtype=np.float64)
        index = {c: i for i, c in enumerate(self.classes_)}
        for i in nearest:
            counts[index[self.labels_[i]]] += 1
        return counts / max(len(nearest), 1)

    def predict(self, instance) -> Any:
        distribution = self.class_distribution(instance)
        return self.classes_[int(np.argmax(distribution))]
