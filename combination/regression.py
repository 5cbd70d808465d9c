"""Regression-based combinations: OLS, LAD, constrained least squares, complete subsets"""

import logging
import warnings
from itertools import combinations
from math import comb
from typing import Optional

import numpy as np
import statsmodels.api as sm

from utils.progress import ProgressMonitor
from .base import CombinationEstimator, CombinationFit, select_by_criterion
from .errors import CollinearityWarning, NotFitError
from .solvers import (
    LinearSolver,
    LinearProgramSolver,
    QuadraticProgramSolver,
    StatsmodelsOLSSolver,
    HighsLADSolver,
    SLSQPSolver,
)

logger = logging.getLogger(__name__)


def _design(forecasts: np.ndarray) -> np.ndarray:
    """Forecast matrix with a leading intercept column"""
    return sm.add_constant(forecasts, has_constant='add')


class OrdinaryLeastSquares(CombinationEstimator):
    """
    Granger/Ramanathan (1984) regression of the actuals on the forecasts
    with an intercept. Weights are unrestricted and can be negative.

    When the design matrix is rank deficient a CollinearityWarning is
    issued and the minimum-norm least-squares solution is returned.
    """

    method_name = 'Ordinary Least Squares Regression'

    def __init__(self, solver: Optional[LinearSolver] = None):
        self.solver = solver or StatsmodelsOLSSolver()

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        design = _design(forecasts)
        linear_fit = self.solver.fit(design, actual)

        rank_deficient = linear_fit.rank < design.shape[1]
        if rank_deficient:
            message = (
                f"OLS design matrix has rank {linear_fit.rank} < {design.shape[1]} columns; "
                "using the minimum-norm least-squares solution"
            )
            logger.warning(message)
            warnings.warn(message, CollinearityWarning)

        params = np.asarray(linear_fit.params, dtype=float)
        return CombinationFit(
            weights=params[1:],
            intercept=float(params[0]),
            details={'rank': linear_fit.rank, 'rank_deficient': rank_deficient}
        )


class LeastAbsoluteDeviation(CombinationEstimator):
    """Median regression of the actuals on the forecasts (with intercept), robust to outliers"""

    method_name = 'Least Absolute Deviation'

    def __init__(self, solver: Optional[LinearProgramSolver] = None):
        self.solver = solver or HighsLADSolver()

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        params = np.asarray(self.solver.solve_lad(_design(forecasts), actual), dtype=float)
        return CombinationFit(weights=params[1:], intercept=float(params[0]))


class ConstrainedLeastSquares(CombinationEstimator):
    """
    Least squares without intercept, with weights summing to one and, by
    default, non-negative (the simplex constraint).

    Parameters:
    - nonnegative: Also require every weight to be >= 0
    - solver: QuadraticProgramSolver used for the constrained fit
    """

    method_name = 'Constrained Least Squares'

    def __init__(self, nonnegative: bool = True, solver: Optional[QuadraticProgramSolver] = None):
        self.nonnegative = nonnegative
        self.solver = solver or SLSQPSolver()

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        n_obs = len(actual)
        P = forecasts.T @ forecasts / n_obs
        q = -forecasts.T @ actual / n_obs
        weights = np.asarray(self.solver.solve(P, q, nonnegative=self.nonnegative), dtype=float)
        return CombinationFit(weights=weights, details={'nonnegative': self.nonnegative})


class CompleteSubsetRegression(CombinationEstimator):
    """
    Complete subset regression (Elliott, Gargano & Timmermann 2013).

    Runs OLS with intercept on every subset of `subset_size` models and
    averages the coefficients, counting excluded models as zero. If
    subset_size is None, sizes 1..N-1 are compared by criterion.
    """

    method_name = 'Complete Subset Regression'

    def __init__(self,
                 subset_size: Optional[int] = None,
                 criterion: str = 'RMSE',
                 solver: Optional[LinearSolver] = None,
                 show_progress: bool = False):
        if subset_size is not None and subset_size < 1:
            raise ValueError(f"subset_size must be positive, got {subset_size}")
        self.subset_size = subset_size
        self.criterion = criterion
        self.solver = solver or StatsmodelsOLSSolver()
        self.show_progress = show_progress

    def _fit_subsets(self, actual: np.ndarray, forecasts: np.ndarray, size: int) -> CombinationFit:
        n_models = forecasts.shape[1]
        n_subsets = comb(n_models, size)
        weights = np.zeros(n_models)
        intercept = 0.0

        monitor = ProgressMonitor(
            total=n_subsets,
            desc=f"Subsets of size {size}",
            disable=not self.show_progress
        )
        try:
            for subset in combinations(range(n_models), size):
                columns = list(subset)
                params = self.solver.fit(_design(forecasts[:, columns]), actual).params
                intercept += params[0]
                weights[columns] += params[1:]
                monitor.update()
        finally:
            monitor.close()

        return CombinationFit(
            weights=weights / n_subsets,
            intercept=intercept / n_subsets,
            details={'subset_size': size, 'n_subsets': n_subsets}
        )

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        n_models = forecasts.shape[1]
        if self.subset_size is not None:
            if self.subset_size > n_models:
                raise NotFitError(
                    f"subset_size {self.subset_size} exceeds the number of models ({n_models})"
                )
            return self._fit_subsets(actual, forecasts, self.subset_size)

        candidates = (
            (size, self._fit_subsets(actual, forecasts, size))
            for size in range(1, n_models)
        )
        size, fit, scores = select_by_criterion(
            candidates, actual, self.criterion,
            lambda candidate: self._combine(forecasts, candidate)
        )
        logger.info(f"{self.method_name}: selected subset size {size} by {self.criterion}")
        fit.details['criterion_scores'] = scores
        return fit
