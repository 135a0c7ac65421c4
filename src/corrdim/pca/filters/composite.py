import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Union

from . import get_filter, register_filter
from .base import EigenPairFilter
from ..eigenpairs import FilteredEigenPairs, SortedEigenPairs
from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)

FilterLike = Union[EigenPairFilter, str, Dict]


def _build(item: FilterLike) -> EigenPairFilter:
    # accepts an instance, a registered name, or {"name": ..., **params}
    if isinstance(item, EigenPairFilter):
        return item
    if isinstance(item, str):
        return get_filter(item)()
    if isinstance(item, dict):
        params = dict(item)
        name = params.pop("name", None)
        if name is None:
            raise ConfigurationError(f"Filter definition needs a 'name': {item!r}")
        return get_filter(name)(**params)
    raise ConfigurationError(f"Cannot build an eigenpair filter from {item!r}")


@register_filter('composite')
@dataclass
class CompositeEigenPairFilter(EigenPairFilter):
    """
    Chain of filters. Each stage re-partitions the strong pairs of the
    previous stage; pairs marked weak by any stage stay weak. The final weak
    list is reported in input order, so every input pair ends
    up in exactly one of the two lists.
    """

    filters: Sequence[FilterLike] = field(default_factory=list)

    def __post_init__(self):
        self.filters = [_build(f) for f in self.filters]
        if len(self.filters) == 0:
            raise ConfigurationError("A composite filter needs at least one filter.")

    def filter(self, eigenpairs: SortedEigenPairs) -> FilteredEigenPairs:
        # stages may rescale eigenvectors, so track pairs by input position
        positions = list(range(len(eigenpairs)))
        current = eigenpairs
        weak_by_position: Dict[int, object] = {}
        strong: List = list(eigenpairs)

        for stage in self.filters:
            result = stage.filter(current)
            kept = []
            for pos, pair in zip(positions, current):
                if _contains(result.weak, pair):
                    weak_by_position[pos] = pair
                else:
                    kept.append(pos)
            if len(result.strong) != len(kept):
                raise RuntimeError(
                    f"Filter {stage!r} did not partition its input "
                    f"({len(result.strong)} strong, {len(kept)} expected)."
                )
            positions = kept
            strong = result.strong
            current = result.strong_pairs()
            logger.debug("stage %s: %d strong, %d weak so far", stage.name, len(strong), len(weak_by_position))

        weak = [weak_by_position[p] for p in sorted(weak_by_position)]
        return FilteredEigenPairs(strong, weak, dim=eigenpairs.dim)


def _contains(pairs, pair) -> bool:
    return any(p is pair for p in pairs)
