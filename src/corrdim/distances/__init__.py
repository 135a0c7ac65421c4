from typing import Callable, Dict, Iterable, Type

from .base import DistanceFunction, SimilarityFunction

# Strategy signature: cls(**params) -> DistanceFunction
DistanceFactory = Callable[..., DistanceFunction]

_DISTANCES: Dict[str, DistanceFactory] = {}

def register_distance(name: str):
    def deco(cls: Type[DistanceFunction]):
        _DISTANCES[name] = cls
        cls.name = name
        return cls
    return deco

def get_distance(name: str) -> DistanceFactory:
    if name not in _DISTANCES:
        raise ValueError(f"Unknown distance function: {name}. Available: {list(_DISTANCES)}")
    return _DISTANCES[name]

def list_distances() -> Iterable[str]:
    return tuple(_DISTANCES.keys())

# import built-ins
from .euclidean import EuclideanDistance, ManhattanDistance  # noqa: E402
from .kernel import KernelFunction, KernelDistance  # noqa: E402
from .representation import RepresentationSelectingDistance, SelectedRepresentationDistance  # noqa: E402
from .locally_weighted import LocallyWeightedDistance  # noqa: E402

__all__ = [
    "DistanceFunction",
    "SimilarityFunction",
    "EuclideanDistance",
    "ManhattanDistance",
    "KernelFunction",
    "KernelDistance",
    "RepresentationSelectingDistance",
    "SelectedRepresentationDistance",
    "LocallyWeightedDistance",
    "register_distance",
    "get_distance",
    "list_distances",
]
