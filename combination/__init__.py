"""
Forecast combination package.
Estimates weights that blend candidate model forecasts into one forecast.
"""

from .errors import (
    CombinationError,
    InvalidInputError,
    NotFitError,
    LengthMismatchError,
    CollinearityWarning,
)
from .models import ForecastBundle, CombinationResult, AccuracyRecord
from .accuracy import compute_accuracy
from .applier import apply_weights, predict
from .averaging import SimpleAverage, MedianCombination, TrimmedMean, WinsorizedMean
from .performance import InverseRank, BatesGranger, InverseMSE, NewboldGranger
from .regression import (
    OrdinaryLeastSquares,
    LeastAbsoluteDeviation,
    ConstrainedLeastSquares,
    CompleteSubsetRegression,
)
from .eigenvector import (
    StandardEigenvector,
    BiasCorrectedEigenvector,
    TrimmedEigenvector,
    TrimmedBiasCorrectedEigenvector,
)
from .registry import METHODS, get_estimator
from .selection import auto_combine
from .dispersion import cross_sectional_dispersion

__all__ = [
    'CombinationError', 'InvalidInputError', 'NotFitError', 'LengthMismatchError',
    'CollinearityWarning',
    'ForecastBundle', 'CombinationResult', 'AccuracyRecord',
    'compute_accuracy', 'apply_weights', 'predict',
    'SimpleAverage', 'MedianCombination', 'TrimmedMean', 'WinsorizedMean',
    'InverseRank', 'BatesGranger', 'InverseMSE', 'NewboldGranger',
    'OrdinaryLeastSquares', 'LeastAbsoluteDeviation', 'ConstrainedLeastSquares',
    'CompleteSubsetRegression',
    'StandardEigenvector', 'BiasCorrectedEigenvector', 'TrimmedEigenvector',
    'TrimmedBiasCorrectedEigenvector',
    'METHODS', 'get_estimator', 'auto_combine', 'cross_sectional_dispersion',
]
