"""
Locally weighted distance.

A preprocessor-based distance: before use it runs a local PCA preprocessor
over the whole database, then compares two points p, q through their local
similarity matrices M_p, M_q (see `LocalPCAResult.similarity_matrix`):

    d(p, q) = max( sqrt(d^T M_p d), sqrt(d^T M_q d) ),   d = x_p - x_q

With the default weights (big=1, small=0) M projects onto the weak
directions, so d measures how far q lies outside p's correlation subspace
and vice versa.
"""

from typing import Optional

import numpy as np

from . import register_distance
from .base import DistanceFunction
from ..exceptions import InvalidStateError
from ..preprocessing.store import LOCAL_PCA, AnnotationStore

__all__ = ["LocallyWeightedDistance"]


@register_distance('locally-weighted')
class LocallyWeightedDistance(DistanceFunction):
    """
    Parameters
    ----------
    preprocessor : object with `run(database, store) -> report`, typically a
                   `LocalPCAPreprocessor`
    """

    def __init__(self, preprocessor):
        self.preprocessor = preprocessor
        # multi-represented databases are compared in the analyzed representation
        self.representation = getattr(getattr(preprocessor, "pca", None), "representation", None)
        self.database = None
        self.store: Optional[AnnotationStore] = None

    def set_database(self, database, store: Optional[AnnotationStore] = None) -> "LocallyWeightedDistance":
        report = self.preprocessor.run(database, store=store)
        self.database = database
        self.store = report.store
        return self

    def distance(self, p, q) -> float:
        """Distance between the database objects with ids `p` and `q`."""
        if self.database is None or self.store is None:
            raise InvalidStateError("Call set_database() before computing locally weighted distances.")
        x_p, x_q = self.database.vectors([p, q], representation=self.representation)
        diff = x_p - x_q
        return max(self._weighted(p, diff), self._weighted(q, diff))

    def _weighted(self, point_id, diff: np.ndarray) -> float:
        result = self.store.get(point_id, LOCAL_PCA, None)
        if result is None:
            # no local model (skipped point): no correlation to exploit
            return float(np.linalg.norm(diff))
        sq = float(diff @ result.similarity_matrix @ diff)
        return float(np.sqrt(max(sq, 0.0)))

    def __repr__(self) -> str:
        return f"LocallyWeightedDistance({self.preprocessor!r})"
