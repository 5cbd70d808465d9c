"""Forecast accuracy statistics for combined forecasts"""

import logging
from typing import Optional

import numpy as np
from statsmodels.tsa.stattools import acf

from config.model_config import SELECTION_CRITERIA
from .errors import LengthMismatchError
from .models import AccuracyRecord

logger = logging.getLogger(__name__)


def _safe_ratio(numerator: float, denominator: float) -> float:
    """Ratio that is 0 for a zero numerator and inf for a zero denominator"""
    if numerator == 0:
        return 0.0
    if denominator == 0:
        return float('inf')
    return float(numerator / denominator)


def naive_scale(actual: np.ndarray) -> float:
    """Mean absolute error of the naive (lag-1) forecast of a series"""
    actual = np.asarray(actual, dtype=float)
    if len(actual) < 2:
        return float('nan')
    return float(np.mean(np.abs(np.diff(actual))))


def _lag1_autocorrelation(errors: np.ndarray) -> float:
    if len(errors) < 2:
        return float('nan')
    if np.var(errors) == 0:
        return 0.0
    return float(acf(errors, nlags=1, fft=False)[1])


def _theils_u(predicted: np.ndarray, actual: np.ndarray) -> float:
    """Theil's U relative to the no-change forecast"""
    if len(actual) < 2:
        return float('nan')
    with np.errstate(divide='ignore', invalid='ignore'):
        forecast_change = (predicted[1:] - actual[1:]) / actual[:-1]
        actual_change = (actual[1:] - actual[:-1]) / actual[:-1]
    return float(np.sqrt(_safe_ratio(np.sum(forecast_change ** 2), np.sum(actual_change ** 2))))


def compute_accuracy(predicted,
                     actual,
                     label: str,
                     scale: Optional[float] = None) -> AccuracyRecord:
    """
    Compute accuracy statistics of predicted against actual values

    Parameters:
    - predicted: Combined forecast values
    - actual: Observed values, same length as predicted
    - label: Dataset label, e.g. 'Training Set'
    - scale: MASE denominator; defaults to the naive lag-1 MAE of actual.
      Test-set records pass the training series' scale.
    """
    predicted = np.asarray(predicted, dtype=float)
    actual = np.asarray(actual, dtype=float)

    if predicted.shape != actual.shape:
        raise LengthMismatchError(
            f"Predicted values have shape {predicted.shape}, actual values {actual.shape}"
        )
    if len(actual) == 0:
        raise LengthMismatchError("Cannot compute accuracy of empty sequences")

    errors = actual - predicted
    with np.errstate(divide='ignore', invalid='ignore'):
        percentage_errors = np.where(errors == 0, 0.0, 100 * errors / actual)

    mae = float(np.mean(np.abs(errors)))
    if scale is None:
        scale = naive_scale(actual)

    return AccuracyRecord(
        label=label,
        n_obs=len(actual),
        me=float(np.mean(errors)),
        rmse=float(np.sqrt(np.mean(errors ** 2))),
        mae=mae,
        mpe=float(np.mean(percentage_errors)),
        mape=float(np.mean(np.abs(percentage_errors))),
        mase=_safe_ratio(mae, scale),
        acf1=_lag1_autocorrelation(errors),
        theils_u=_theils_u(predicted, actual),
    )


def criterion_value(predicted, actual, criterion: str = 'RMSE') -> float:
    """Single accuracy statistic used to rank candidate fits (lower is better)"""
    if criterion not in SELECTION_CRITERIA:
        raise ValueError(
            f"Unknown criterion: {criterion}. Expected one of: {list(SELECTION_CRITERIA)}"
        )
    record = compute_accuracy(predicted, actual, label=criterion)
    return record.as_dict()[criterion]
