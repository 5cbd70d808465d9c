"""Combinations weighted by the historical performance of each model"""

import logging

import numpy as np
from scipy import linalg, stats

from .base import CombinationEstimator, CombinationFit
from .errors import NotFitError

logger = logging.getLogger(__name__)


def forecast_errors(actual: np.ndarray, forecasts: np.ndarray) -> np.ndarray:
    """Error matrix e_{t,i} = actual_t - forecast_{t,i}"""
    return actual[:, None] - forecasts


def _normalize_inverse(values: np.ndarray, name: str) -> np.ndarray:
    if np.any(values == 0):
        # A perfect model takes all the weight (shared if several are perfect)
        perfect = (values == 0).astype(float)
        logger.warning(f"{int(perfect.sum())} model(s) have zero {name}; weight goes to them")
        return perfect / perfect.sum()
    inverse = 1.0 / values
    return inverse / inverse.sum()


class InverseRank(CombinationEstimator):
    """Weights inversely proportional to each model's MSE rank (Aiolfi & Timmermann)"""

    method_name = 'Inverse Rank'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        mse = np.mean(forecast_errors(actual, forecasts) ** 2, axis=0)
        ranks = stats.rankdata(mse, method='average')
        inverse = 1.0 / ranks
        return CombinationFit(
            weights=inverse / inverse.sum(),
            details={'ranks': ranks, 'mse': mse}
        )


class BatesGranger(CombinationEstimator):
    """Weights inversely proportional to each model's error variance, ignoring correlations"""

    method_name = 'Bates/Granger (1969)'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        variances = np.var(forecast_errors(actual, forecasts), axis=0, ddof=1)
        return CombinationFit(
            weights=_normalize_inverse(variances, 'error variance'),
            details={'error_variance': variances}
        )


class InverseMSE(CombinationEstimator):
    """Weights inversely proportional to each model's mean squared error"""

    method_name = 'Inverse MSE Weights'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        mse = np.mean(forecast_errors(actual, forecasts) ** 2, axis=0)
        return CombinationFit(
            weights=_normalize_inverse(mse, 'MSE'),
            details={'mse': mse}
        )


class NewboldGranger(CombinationEstimator):
    """
    Optimal sum-to-one weights from the error second-moment matrix S = E'E/T:
    w = S^-1 1 / (1' S^-1 1)
    """

    method_name = 'Newbold/Granger (1974)'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        errors = forecast_errors(actual, forecasts)
        moment_matrix = errors.T @ errors / len(actual)
        ones = np.ones(forecasts.shape[1])
        try:
            solved = linalg.solve(moment_matrix, ones, assume_a='pos')
        except (linalg.LinAlgError, ValueError) as e:
            raise NotFitError(f"Error moment matrix is singular: {str(e)}")
        return CombinationFit(weights=solved / (ones @ solved))
