"""Shared estimation flow for all combination methods"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from .accuracy import compute_accuracy, criterion_value, naive_scale
from .applier import apply_weights
from .errors import InvalidInputError, NotFitError
from .models import ForecastBundle, CombinationResult, TRAIN_LABEL, TEST_LABEL

logger = logging.getLogger(__name__)


@dataclass
class CombinationFit:
    """Weights (and intercept) estimated from the training data"""
    weights: np.ndarray
    intercept: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)


class CombinationEstimator:
    """
    Base class for forecast combination methods.

    Subclasses implement `_fit`, which maps the training actuals and forecast
    matrix to a CombinationFit. Non-linear methods also override `_combine`.
    The base class validates the bundle, applies the fit to training and
    test data and computes accuracy statistics.
    """

    method_name = 'Combination'
    linear = True

    def estimate(self, bundle: ForecastBundle) -> CombinationResult:
        """Fit the combination on the training set and apply it to all data"""
        self._check_bundle(bundle)

        try:
            fit = self._fit(bundle.actual_train, bundle.forecasts_train)
        except Exception as e:
            logger.error(f"Error fitting {self.method_name}: {str(e)}")
            raise

        fitted = self._combine(bundle.forecasts_train, fit)
        accuracy_train = compute_accuracy(fitted, bundle.actual_train, TRAIN_LABEL)

        forecasts_test = None
        accuracy_test = None
        if bundle.forecasts_test is not None:
            forecasts_test = self._combine(bundle.forecasts_test, fit)
            if bundle.actual_test is not None:
                accuracy_test = compute_accuracy(
                    forecasts_test,
                    bundle.actual_test,
                    TEST_LABEL,
                    scale=naive_scale(bundle.actual_train)
                )

        logger.info(
            f"{self.method_name}: {bundle.n_models} models, {bundle.n_obs} observations, "
            f"training RMSE {accuracy_train.rmse:.4f}"
            + (f", test RMSE {accuracy_test.rmse:.4f}" if accuracy_test is not None else "")
        )

        return CombinationResult(
            method_name=self.method_name,
            models=bundle.model_names,
            weights=fit.weights,
            intercept=fit.intercept,
            fitted_train=fitted,
            accuracy_train=accuracy_train,
            forecasts_test=forecasts_test,
            accuracy_test=accuracy_test,
            input_data=bundle,
            linear=self.linear,
            details=fit.details,
        )

    def _check_bundle(self, bundle: ForecastBundle):
        if not isinstance(bundle, ForecastBundle):
            raise InvalidInputError(
                f"{self.method_name} expects a ForecastBundle, got {type(bundle).__name__}. "
                "Use prepare_bundle() to bring data into the correct format"
            )
        if bundle.n_obs < bundle.n_models + 1:
            raise NotFitError(
                f"{self.method_name} needs at least {bundle.n_models + 1} training observations "
                f"for {bundle.n_models} models, got {bundle.n_obs}"
            )

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        raise NotImplementedError

    def _combine(self, forecasts: np.ndarray, fit: CombinationFit) -> np.ndarray:
        return apply_weights(forecasts, fit.weights, fit.intercept)


def select_by_criterion(candidates, actual: np.ndarray, criterion: str, combine):
    """
    Pick the candidate whose in-sample combination scores best

    Parameters:
    - candidates: Iterable of (parameter, CombinationFit) pairs
    - actual: Training actuals
    - criterion: One of the selection criteria ('RMSE', 'MAE', 'MAPE')
    - combine: Callable mapping a CombinationFit to its fitted values

    Returns (parameter, fit, scores) for the best candidate; ties keep the
    earliest candidate.
    """
    best = None
    scores = {}
    for parameter, fit in candidates:
        score = criterion_value(combine(fit), actual, criterion)
        scores[parameter] = score
        if best is None or score < best[2]:
            best = (parameter, fit, score)

    if best is None:
        raise NotFitError("No candidate parameter could be evaluated")

    logger.debug(f"Criterion {criterion} scores: {scores}")
    return best[0], best[1], scores
