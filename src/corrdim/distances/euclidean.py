import numpy as np

from . import register_distance
from .base import DistanceFunction, as_vector


@register_distance('euclidean')
class EuclideanDistance(DistanceFunction):
    """Euclidean (L2) distance between two vectors."""

    def distance(self, o1, o2) -> float:
        x, y = as_vector(o1), as_vector(o2)
        if x.shape != y.shape:
            raise ValueError("o1 and o2 must have the same shape")
        return float(np.linalg.norm(x - y))

    def __repr__(self) -> str:
        return "EuclideanDistance()"


@register_distance('manhattan')
class ManhattanDistance(DistanceFunction):
    def distance(self, o1, o2) -> float:
        x, y = as_vector(o1), as_vector(o2)
        if x.shape != y.shape:
            raise ValueError("o1 and o2 must have the same shape")
        return float(np.abs(x - y).sum())

    def __repr__(self) -> str:
        return "ManhattanDistance()"
