"""
Distance over multi-represented objects.

`RepresentationSelectingDistance` computes the distance between two
`MultiRepresentedObject`s within one of their representations, delegating
to the distance function configured for that representation (or to a shared
default). The representation index is an explicit argument of every call;
`bind(index)` returns an ordinary two-argument distance function for a fixed
representation, e.g. to hand to a neighborhood query.
"""

from typing import Any, List, Optional, Sequence

from . import register_distance
from .base import DistanceFunction
from .euclidean import EuclideanDistance
from ..exceptions import ConfigurationError, InvalidStateError

__all__ = ["RepresentationSelectingDistance", "SelectedRepresentationDistance"]


@register_distance('representation')
class RepresentationSelectingDistance(DistanceFunction):
    """
    Parameters
    ----------
    distances : one distance function per representation index
    default : shared distance function used when `distances` is not given
              (Euclidean when neither is given)
    """

    def __init__(
        self,
        distances: Optional[Sequence[DistanceFunction]] = None,
        default: Optional[DistanceFunction] = None,
    ):
        if distances is not None:
            distances = list(distances)
            if len(distances) == 0:
                raise ConfigurationError("No distance functions specified.")
        elif default is None:
            default = EuclideanDistance()
        self.distances: List[DistanceFunction] = distances or []
        self.default = default

    def distance_function_for(self, representation: Optional[int]) -> DistanceFunction:
        if representation is None or representation < 0:
            raise InvalidStateError(f"Wrong representation set, current index = {representation}")
        if self.distances:
            if representation < len(self.distances):
                return self.distances[representation]
            if self.default is None:
                raise InvalidStateError(
                    f"Wrong representation set, current index = {representation} "
                    f"(only {len(self.distances)} distance functions configured)"
                )
        if self.default is None:
            raise InvalidStateError("No distance function configured.")
        return self.default

    def distance(self, o1, o2, representation: Optional[int] = None) -> float:
        fn = self.distance_function_for(representation)
        return fn.distance(o1.get_representation(representation), o2.get_representation(representation))

    def __call__(self, o1, o2, representation: Optional[int] = None) -> float:
        return self.distance(o1, o2, representation)

    def value_of(self, pattern: str, representation: Optional[int] = None) -> float:
        return self.distance_function_for(representation).value_of(pattern)

    def infinite_distance(self, representation: Optional[int] = None) -> float:
        return self.distance_function_for(representation).infinite_distance()

    def null_distance(self, representation: Optional[int] = None) -> float:
        return self.distance_function_for(representation).null_distance()

    def undefined_distance(self, representation: Optional[int] = None) -> float:
        return self.distance_function_for(representation).undefined_distance()

    def bind(self, representation: int) -> "SelectedRepresentationDistance":
        # validate eagerly so misconfiguration shows up before any query runs
        self.distance_function_for(representation)
        return SelectedRepresentationDistance(self, representation)

    def __repr__(self) -> str:
        return f"RepresentationSelectingDistance(distances={self.distances!r}, default={self.default!r})"


class SelectedRepresentationDistance(DistanceFunction):
    """A `RepresentationSelectingDistance` with its representation fixed."""

    def __init__(self, parent: RepresentationSelectingDistance, representation: int):
        self.parent = parent
        self.representation = representation
        self.name = f"{parent.name}[{representation}]"

    def distance(self, o1: Any, o2: Any) -> float:
        return self.parent.distance(o1, o2, self.representation)

    def value_of(self, pattern: str) -> float:
        return self.parent.value_of(pattern, self.representation)

    def infinite_distance(self) -> float:
        return self.parent.infinite_distance(self.representation)

    def null_distance(self) -> float:
        return self.parent.null_distance(self.representation)

    def undefined_distance(self) -> float:
        return self.parent.undefined_distance(self.representation)

    def __repr__(self) -> str:
        return f"SelectedRepresentationDistance(representation={self.representation})"
