"""Apply combination weights (or row-wise rules) to forecast matrices"""

from typing import Optional

import numpy as np

from .errors import InvalidInputError
from .models import CombinationResult


def _as_matrix(forecasts) -> np.ndarray:
    matrix = np.asarray(forecasts, dtype=float)
    if matrix.ndim != 2:
        raise InvalidInputError(f"Forecasts must be a 2-D matrix, got shape {matrix.shape}")
    return matrix


def apply_weights(forecasts, weights, intercept: Optional[float] = None) -> np.ndarray:
    """combined_t = intercept + sum_i weights_i * forecast_{i,t}"""
    matrix = _as_matrix(forecasts)
    weights = np.asarray(weights, dtype=float)
    if matrix.shape[1] != len(weights):
        raise InvalidInputError(
            f"Forecast matrix has {matrix.shape[1]} columns but {len(weights)} weights were given"
        )
    combined = matrix @ weights
    if intercept is not None:
        combined = combined + intercept
    return combined


def trim_count(n_models: int, trim_factor: float) -> int:
    """Number of forecasts removed (or capped) at each end of a row"""
    if not 0 <= trim_factor < 0.5:
        raise ValueError(f"trim_factor must be in [0, 0.5), got {trim_factor}")
    # Small offset guards against products like 5 * 0.2 landing below 1
    return int(np.floor(n_models * trim_factor + 1e-9))


def row_median(forecasts) -> np.ndarray:
    return np.median(_as_matrix(forecasts), axis=1)


def row_trimmed_mean(forecasts, trim_factor: float) -> np.ndarray:
    matrix = _as_matrix(forecasts)
    n_trim = trim_count(matrix.shape[1], trim_factor)
    ordered = np.sort(matrix, axis=1)
    return ordered[:, n_trim:matrix.shape[1] - n_trim].mean(axis=1)


def row_winsorized_mean(forecasts, trim_factor: float) -> np.ndarray:
    matrix = _as_matrix(forecasts)
    n_models = matrix.shape[1]
    n_trim = trim_count(n_models, trim_factor)
    ordered = np.sort(matrix, axis=1)
    if n_trim > 0:
        ordered[:, :n_trim] = ordered[:, [n_trim]]
        ordered[:, n_models - n_trim:] = ordered[:, [n_models - n_trim - 1]]
    return ordered.mean(axis=1)


ROW_RULES = {
    'median': lambda forecasts, details: row_median(forecasts),
    'trimmed': lambda forecasts, details: row_trimmed_mean(forecasts, details['trim_factor']),
    'winsorized': lambda forecasts, details: row_winsorized_mean(forecasts, details['trim_factor']),
}


def predict(result: CombinationResult, forecasts) -> np.ndarray:
    """Combine a new forecast matrix with a fitted result"""
    matrix = _as_matrix(forecasts)
    if matrix.shape[1] != len(result.models):
        raise InvalidInputError(
            f"Forecast matrix has {matrix.shape[1]} columns, result was fit on {len(result.models)} models"
        )
    if result.linear:
        return apply_weights(matrix, result.weights, result.intercept)

    rule = result.details.get('rule')
    if rule not in ROW_RULES:
        raise InvalidInputError(f"Result of {result.method_name} has no row-wise rule to apply")
    return ROW_RULES[rule](matrix, result.details)
