"""
Distance and similarity function contracts.

A distance function maps two objects to a float and exposes the sentinel
values used by range queries:

    infinite_distance()  -> inf
    null_distance()      -> 0.0
    undefined_distance() -> nan

A similarity function (e.g. a kernel) maps two objects to a float where
larger means closer.
"""

from abc import ABC, abstractmethod
from typing import Any

import numpy as np


class DistanceFunction(ABC):
    name: str = "abstract"

    @abstractmethod
    def distance(self, o1: Any, o2: Any) -> float:
        pass

    def __call__(self, o1: Any, o2: Any) -> float:
        return self.distance(o1, o2)

    def value_of(self, pattern: str) -> float:
        """Parse a distance value, e.g. '0.5', 'inf' or 'nan'."""
        text = str(pattern).strip().lower()
        if text in ("inf", "+inf", "infinity"):
            return self.infinite_distance()
        if text in ("nan", "undefined"):
            return self.undefined_distance()
        try:
            return float(text)
        except ValueError:
            raise ValueError(f"Given pattern {pattern!r} does not match a distance value.") from None

    def infinite_distance(self) -> float:
        return float(np.inf)

    def null_distance(self) -> float:
        return 0.0

    def undefined_distance(self) -> float:
        return float(np.nan)


class SimilarityFunction(ABC):
    name: str = "abstract"

    @abstractmethod
    def similarity(self, o1: Any, o2: Any) -> float:
        pass

    def __call__(self, o1: Any, o2: Any) -> float:
        return self.similarity(o1, o2)


def as_vector(o) -> np.ndarray:
    return np.asarray(o, dtype=np.float64).reshape(-1)
