"""Outlier scores with their normalization bounds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, List, Sequence, Tuple

import numpy as np

__all__ = ["OutlierScoreMeta", "OutlierResult"]


@dataclass(frozen=True)
class OutlierScoreMeta:
    """
    Observed and theoretical score range. Higher scores are more anomalous;
    `baseline` is the score of a perfectly ordinary object.
    """

    min: float
    max: float
    theoretical_min: float = 0.0
    theoretical_max: float = float(np.inf)
    baseline: float = 0.0

    def normalize(self, value: float) -> float:
        """Rescale `value` to [0, 1] using the observed range."""
        span = self.max - self.min
        if not span > 0:
            return 0.0
        return (value - self.min) / span


@dataclass(frozen=True)
class OutlierResult:
    scores: Dict[Hashable, float]
    meta: OutlierScoreMeta

    def __len__(self) -> int:
        return len(self.scores)

    def __getitem__(self, point_id: Hashable) -> float:
        return self.scores[point_id]

    def normalized(self) -> Dict[Hashable, float]:
        return {pid: self.meta.normalize(s) for pid, s in self.scores.items()}

    def top(self, n: int) -> List[Tuple[Hashable, float]]:
        """The `n` highest scoring objects, most anomalous first."""
        ranked = sorted(self.scores.items(), key=lambda kv: -kv[1])
        return ranked[:n]

    def as_array(self, ids: Sequence[Hashable]) -> np.ndarray:
        return np.array([self.scores[pid] for pid in ids], dtype=np.float64)
