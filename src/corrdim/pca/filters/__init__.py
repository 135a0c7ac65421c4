from typing import Callable, Dict, Iterable, Type

from .base import EigenPairFilter, as_sorted

# Strategy signature: cls(**params).filter(SortedEigenPairs) -> FilteredEigenPairs
FilterFactory = Callable[..., EigenPairFilter]

_FILTERS: Dict[str, FilterFactory] = {}

def register_filter(name: str):
    def deco(cls: Type[EigenPairFilter]):
        _FILTERS[name] = cls
        cls.name = name
        return cls
    return deco

def get_filter(name: str) -> FilterFactory:
    if name not in _FILTERS:
        raise ValueError(f"Unknown eigenpair filter: {name}. Available: {list(_FILTERS)}")
    return _FILTERS[name]

def list_filters() -> Iterable[str]:
    return tuple(_FILTERS.keys())

# import built-ins to populate registry
from .limit import LimitEigenPairFilter  # noqa: E402
from .normalizing import NormalizingEigenPairFilter  # noqa: E402
from .percentage import PercentageEigenPairFilter  # noqa: E402
from .composite import CompositeEigenPairFilter  # noqa: E402

__all__ = [
    "EigenPairFilter",
    "LimitEigenPairFilter",
    "NormalizingEigenPairFilter",
    "PercentageEigenPairFilter",
    "CompositeEigenPairFilter",
    "register_filter",
    "get_filter",
    "list_filters",
    "as_sorted",
]
