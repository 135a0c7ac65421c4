from abc import ABC, abstractmethod

from ..eigenpairs import EigenPairsLike, FilteredEigenPairs, SortedEigenPairs


def as_sorted(eigenpairs: EigenPairsLike) -> SortedEigenPairs:
    if isinstance(eigenpairs, SortedEigenPairs):
        return eigenpairs
    return SortedEigenPairs(eigenpairs)


class EigenPairFilter(ABC):
    """Splits sorted eigenpairs into strong and weak ones."""

    name: str = "abstract"

    @abstractmethod
    def filter(self, eigenpairs: SortedEigenPairs) -> FilteredEigenPairs:
        pass

    def __call__(self, eigenpairs: EigenPairsLike) -> FilteredEigenPairs:
        return self.filter(as_sorted(eigenpairs))
