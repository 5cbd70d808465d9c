"""Detection of (near-)collinear forecast columns"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from statsmodels.stats.outliers_influence import variance_inflation_factor

from combination.accuracy import criterion_value

logger = logging.getLogger(__name__)

# VIFs above this are all treated as "perfectly collinear" and tie
VIF_CAP = 1e10


def condition_number(forecasts: np.ndarray) -> float:
    """Condition number of the forecast matrix with columns scaled to unit length"""
    norms = np.linalg.norm(forecasts, axis=0)
    if np.any(norms == 0):
        return float('inf')
    return float(np.linalg.cond(forecasts / norms))


def _worst_by_criterion(actual: np.ndarray, forecasts: np.ndarray,
                        candidates: Sequence[int], criterion: str) -> int:
    scores = [criterion_value(forecasts[:, i], actual, criterion) for i in candidates]
    # Ties go to the later column
    return candidates[int(len(scores) - 1 - np.argmax(scores[::-1]))]


def _next_by_condition(actual, forecasts, threshold, criterion) -> Optional[int]:
    norms = np.linalg.norm(forecasts, axis=0)
    if np.any(norms == 0):
        return int(np.flatnonzero(norms == 0)[0])
    if condition_number(forecasts) <= threshold:
        return None

    scaled = forecasts / norms
    with np.errstate(divide='ignore', invalid='ignore'):
        vifs = np.array([variance_inflation_factor(scaled, i) for i in range(scaled.shape[1])])
    vifs = np.minimum(np.nan_to_num(vifs, nan=np.inf), VIF_CAP)

    candidates = list(np.flatnonzero(vifs == vifs.max()))
    return _worst_by_criterion(actual, forecasts, candidates, criterion)


def _next_by_correlation(actual, forecasts, threshold, criterion) -> Optional[int]:
    correlations = pd.DataFrame(forecasts).corr().abs().fillna(0.0).values
    np.fill_diagonal(correlations, 0.0)
    i, j = np.unravel_index(np.argmax(correlations), correlations.shape)
    if correlations[i, j] < threshold:
        return None
    return _worst_by_criterion(actual, forecasts, sorted([int(i), int(j)]), criterion)


def find_collinear_models(actual: np.ndarray,
                          forecasts: np.ndarray,
                          model_names: Sequence[str],
                          method: str = 'condition',
                          condition_threshold: float = 1e6,
                          correlation_threshold: float = 0.9999,
                          criterion: str = 'RMSE') -> List[str]:
    """
    Models to remove, in order, until the remaining forecasts are not collinear

    Parameters:
    - actual: Training actuals, used to decide which of two collinear models goes
    - forecasts: Training forecast matrix (T x N)
    - model_names: Names of the forecast columns
    - method: 'condition' (scaled condition number, removal by largest VIF) or
      'correlation' (largest absolute pairwise correlation)
    - condition_threshold / correlation_threshold: Detection thresholds
    - criterion: Accuracy criterion; the worse model of a tied set is removed
    """
    if method == 'condition':
        next_removal = lambda f: _next_by_condition(actual, f, condition_threshold, criterion)
    elif method == 'correlation':
        next_removal = lambda f: _next_by_correlation(actual, f, correlation_threshold, criterion)
    else:
        raise ValueError(f"Unknown collinearity method: {method}. Expected 'condition' or 'correlation'")

    remaining = list(range(forecasts.shape[1]))
    removed = []
    while len(remaining) > 1:
        position = next_removal(forecasts[:, remaining])
        if position is None:
            break
        removed.append(remaining.pop(position))

    collinear = [model_names[i] for i in removed]
    if collinear:
        logger.debug(f"Collinear models ({method}): {collinear}")
    return collinear
