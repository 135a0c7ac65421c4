from .covariance import CovarianceOutlierScorer, deviation_matrix
from .result import OutlierResult, OutlierScoreMeta

__all__ = ["CovarianceOutlierScorer", "deviation_matrix", "OutlierResult", "OutlierScoreMeta"]
