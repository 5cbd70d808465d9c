"""Lookup of combination methods by short key"""

from typing import Dict, Type

from .averaging import SimpleAverage, MedianCombination, TrimmedMean, WinsorizedMean
from .base import CombinationEstimator
from .eigenvector import (
    StandardEigenvector,
    BiasCorrectedEigenvector,
    TrimmedEigenvector,
    TrimmedBiasCorrectedEigenvector,
)
from .performance import InverseRank, BatesGranger, InverseMSE, NewboldGranger
from .regression import (
    OrdinaryLeastSquares,
    LeastAbsoluteDeviation,
    ConstrainedLeastSquares,
    CompleteSubsetRegression,
)

METHODS: Dict[str, Type[CombinationEstimator]] = {
    'SA': SimpleAverage,
    'MED': MedianCombination,
    'TA': TrimmedMean,
    'WA': WinsorizedMean,
    'IRR': InverseRank,
    'BG': BatesGranger,
    'InvW': InverseMSE,
    'NG': NewboldGranger,
    'OLS': OrdinaryLeastSquares,
    'LAD': LeastAbsoluteDeviation,
    'CLS': ConstrainedLeastSquares,
    'CSR': CompleteSubsetRegression,
    'EIG1': StandardEigenvector,
    'EIG2': BiasCorrectedEigenvector,
    'EIG3': TrimmedEigenvector,
    'EIG4': TrimmedBiasCorrectedEigenvector,
}


def get_estimator(key: str, **options) -> CombinationEstimator:
    """Instantiate the combination method registered under key"""
    if key not in METHODS:
        raise ValueError(f"Unknown combination method: {key}. Expected one of: {list(METHODS)}")
    return METHODS[key](**options)
