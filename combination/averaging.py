"""
Averaging combinations: simple average, median, trimmed and winsorized means.

Median, trimmed and winsorized means are row-wise order statistics, so
their weights are not fixed. The reported weight of a model is its
effective weight averaged over the training rows.
"""

import logging
from typing import Optional

import numpy as np

from .applier import ROW_RULES, trim_count
from .base import CombinationEstimator, CombinationFit, select_by_criterion

logger = logging.getLogger(__name__)


def _effective_weights(forecasts: np.ndarray, position_weights: np.ndarray) -> np.ndarray:
    """Average over rows of the weight each model gets from its rank within the row"""
    n_obs = forecasts.shape[0]
    order = np.argsort(forecasts, axis=1, kind='stable')
    row_weights = np.zeros_like(forecasts, dtype=float)
    row_weights[np.arange(n_obs)[:, None], order] = position_weights
    return row_weights.mean(axis=0)


def _median_positions(n_models: int) -> np.ndarray:
    positions = np.zeros(n_models)
    if n_models % 2:
        positions[n_models // 2] = 1.0
    else:
        positions[n_models // 2 - 1:n_models // 2 + 1] = 0.5
    return positions


def _trimmed_positions(n_models: int, n_trim: int) -> np.ndarray:
    positions = np.zeros(n_models)
    positions[n_trim:n_models - n_trim] = 1.0 / (n_models - 2 * n_trim)
    return positions


def _winsorized_positions(n_models: int, n_trim: int) -> np.ndarray:
    positions = np.zeros(n_models)
    positions[n_trim:n_models - n_trim] = 1.0 / n_models
    # Capped forecasts count towards the nearest retained order statistic
    positions[n_trim] += n_trim / n_models
    positions[n_models - n_trim - 1] += n_trim / n_models
    return positions


class SimpleAverage(CombinationEstimator):
    """Equal weights 1/N for every model"""

    method_name = 'Simple Average'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        n_models = forecasts.shape[1]
        return CombinationFit(weights=np.full(n_models, 1.0 / n_models))


class RowRuleEstimator(CombinationEstimator):
    """Combination applied row by row rather than through a weight vector"""

    linear = False

    def _combine(self, forecasts: np.ndarray, fit: CombinationFit) -> np.ndarray:
        return ROW_RULES[fit.details['rule']](forecasts, fit.details)


class MedianCombination(RowRuleEstimator):
    """Median of the model forecasts at each point"""

    method_name = 'Median Forecast'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        positions = _median_positions(forecasts.shape[1])
        return CombinationFit(
            weights=_effective_weights(forecasts, positions),
            details={'rule': 'median'}
        )


class TrimmedMean(RowRuleEstimator):
    """
    Trimmed mean of the model forecasts at each point.

    Parameters:
    - trim_factor: Share of forecasts removed at each end, in [0, 0.5).
      If None, every distinct trim count is tried and the best one on the
      training set (by criterion) is kept.
    - criterion: 'RMSE', 'MAE' or 'MAPE'
    """

    method_name = 'Trimmed Mean'
    rule = 'trimmed'

    def __init__(self, trim_factor: Optional[float] = None, criterion: str = 'RMSE'):
        if trim_factor is not None:
            trim_count(2, trim_factor)  # range check
        self.trim_factor = trim_factor
        self.criterion = criterion

    def _positions(self, n_models: int, n_trim: int) -> np.ndarray:
        return _trimmed_positions(n_models, n_trim)

    def _fit_factor(self, forecasts: np.ndarray, trim_factor: float) -> CombinationFit:
        n_models = forecasts.shape[1]
        n_trim = trim_count(n_models, trim_factor)
        return CombinationFit(
            weights=_effective_weights(forecasts, self._positions(n_models, n_trim)),
            details={'rule': self.rule, 'trim_factor': trim_factor, 'n_trimmed': n_trim}
        )

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        if self.trim_factor is not None:
            return self._fit_factor(forecasts, self.trim_factor)

        n_models = forecasts.shape[1]
        candidates = (
            (n_trim / n_models, self._fit_factor(forecasts, n_trim / n_models))
            for n_trim in range((n_models - 1) // 2 + 1)
        )
        trim_factor, fit, scores = select_by_criterion(
            candidates, actual, self.criterion,
            lambda candidate: self._combine(forecasts, candidate)
        )
        logger.info(f"{self.method_name}: selected trim factor {trim_factor:.3f} by {self.criterion}")
        fit.details['criterion_scores'] = scores
        return fit


class WinsorizedMean(TrimmedMean):
    """
    Winsorized mean: extreme forecasts are capped at the nearest retained
    forecast instead of being removed. Same parameters as TrimmedMean.
    """

    method_name = 'Winsorized Mean'
    rule = 'winsorized'

    def _positions(self, n_models: int, n_trim: int) -> np.ndarray:
        return _winsorized_positions(n_models, n_trim)
