"""
Eigenvector (geometric) combinations of Hsiao & Wan (2014).

All four methods decompose the error second-moment matrix S = E'E/T
(computed on mean-centred data for the bias-corrected variants). For each
eigenpair (l_j, v_j) let d_j = 1'v_j; the eigenvector that dominates the
combination is the one with the smallest scaled eigenvalue l_j / d_j^2.

- Standard:       w = v_j / d_j for that eigenvector (sums to one)
- Bias-corrected: same on centred data, plus intercept mean(y) - mean(F) w
- Trimmed:        w = sum_k (d_k / l_k) v_k / sum_k (d_k^2 / l_k) over the
                  `ntop` eigenvectors with the smallest scaled eigenvalues
- Trimmed bias-corrected: trimmed weights on centred data, with intercept
"""

import logging
from typing import Optional, Tuple

import numpy as np

from config.model_config import SOLVER_SETTINGS
from .base import CombinationEstimator, CombinationFit, select_by_criterion
from .errors import NotFitError
from .solvers import EigenSolver, SymmetricEigenSolver

logger = logging.getLogger(__name__)


def error_moment_matrix(actual: np.ndarray, forecasts: np.ndarray, centered: bool = False) -> np.ndarray:
    """Mean squared prediction error matrix E'E/T"""
    actual = np.asarray(actual, dtype=float)
    forecasts = np.asarray(forecasts, dtype=float)
    if centered:
        actual = actual - actual.mean()
        forecasts = forecasts - forecasts.mean(axis=0)
    errors = actual[:, None] - forecasts
    return errors.T @ errors / len(actual)


class EigenvectorEstimator(CombinationEstimator):
    """Common eigen-system handling for the eigenvector methods"""

    centered = False

    def __init__(self, solver: Optional[EigenSolver] = None):
        self.solver = solver or SymmetricEigenSolver()

    def _eigen_system(self, actual: np.ndarray, forecasts: np.ndarray) -> Tuple[np.ndarray, ...]:
        """Eigenvalues, eigenvectors, their sums d_j and the usable eigen-indices ordered by l_j/d_j^2"""
        matrix = error_moment_matrix(actual, forecasts, centered=self.centered)
        values, vectors = self.solver.decompose(matrix)

        # Tiny negative eigenvalues come from rounding of a PSD matrix
        cutoff = SOLVER_SETTINGS['eigen_tol'] * max(float(np.max(np.abs(values))), 1.0)
        values = np.where(np.abs(values) <= cutoff, 0.0, values)
        sums = vectors.sum(axis=0)

        usable = np.abs(sums) > np.sqrt(np.finfo(float).eps)
        scaled = np.full(len(values), np.inf)
        scaled[usable] = values[usable] / sums[usable] ** 2
        order = np.argsort(scaled, kind='stable')
        order = order[np.isfinite(scaled[order])]

        if len(order) == 0:
            raise NotFitError("No eigenvector of the error moment matrix has a non-zero sum")
        return values, vectors, sums, scaled, order

    def _intercept(self, actual: np.ndarray, forecasts: np.ndarray, weights: np.ndarray) -> Optional[float]:
        if not self.centered:
            return None
        return float(actual.mean() - forecasts.mean(axis=0) @ weights)


class StandardEigenvector(EigenvectorEstimator):
    """Weights from the single eigenvector with the smallest scaled eigenvalue"""

    method_name = 'Standard Eigenvector Approach'

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        values, vectors, sums, scaled, order = self._eigen_system(actual, forecasts)
        selected = order[0]
        weights = vectors[:, selected] / sums[selected]

        logger.debug(
            f"{self.method_name}: eigenvalue {values[selected]:.6g}, "
            f"scaled eigenvalue {scaled[selected]:.6g}"
        )
        return CombinationFit(
            weights=weights,
            intercept=self._intercept(actual, forecasts, weights),
            details={
                'eigenvalue': float(values[selected]),
                'scaled_eigenvalue': float(scaled[selected]),
            }
        )


class BiasCorrectedEigenvector(StandardEigenvector):
    """Standard eigenvector approach on mean-centred data, with intercept"""

    method_name = 'Bias-Corrected Eigenvector Approach'
    centered = True


class TrimmedEigenvector(EigenvectorEstimator):
    """
    Trimmed eigenvector approach.

    Parameters:
    - ntop: Number of eigenvectors (smallest scaled eigenvalues first) kept
      in the combination. If None, 1..N are compared by criterion.
    - criterion: 'RMSE', 'MAE' or 'MAPE'
    - solver: EigenSolver for the error moment matrix
    """

    method_name = 'Trimmed Eigenvector Approach'

    def __init__(self,
                 ntop: Optional[int] = None,
                 criterion: str = 'RMSE',
                 solver: Optional[EigenSolver] = None):
        super().__init__(solver)
        if ntop is not None and ntop < 1:
            raise ValueError(f"ntop must be positive, got {ntop}")
        self.ntop = ntop
        self.criterion = criterion

    def _trimmed_fit(self, actual, forecasts, eigen_system, ntop: int) -> CombinationFit:
        values, vectors, sums, scaled, order = eigen_system
        kept = order[:ntop]

        if np.any(values[kept] == 0):
            # A zero eigenvalue dominates every other term; the limit is that eigenvector alone
            kept = kept[values[kept] == 0][:1]
            weights = vectors[:, kept[0]] / sums[kept[0]]
        else:
            coefficients = sums[kept] / values[kept]
            weights = vectors[:, kept] @ coefficients / np.sum(sums[kept] ** 2 / values[kept])

        return CombinationFit(
            weights=weights,
            intercept=self._intercept(actual, forecasts, weights),
            details={'ntop': ntop, 'eigenvalues': values[kept].tolist()}
        )

    def _fit(self, actual: np.ndarray, forecasts: np.ndarray) -> CombinationFit:
        eigen_system = self._eigen_system(actual, forecasts)
        n_usable = len(eigen_system[-1])

        if self.ntop is not None:
            if self.ntop > forecasts.shape[1]:
                raise NotFitError(
                    f"ntop={self.ntop} exceeds the number of models ({forecasts.shape[1]})"
                )
            return self._trimmed_fit(actual, forecasts, eigen_system, min(self.ntop, n_usable))

        candidates = (
            (ntop, self._trimmed_fit(actual, forecasts, eigen_system, ntop))
            for ntop in range(1, n_usable + 1)
        )
        ntop, fit, scores = select_by_criterion(
            candidates, actual, self.criterion,
            lambda candidate: self._combine(forecasts, candidate)
        )
        logger.info(f"{self.method_name}: selected {ntop} eigenvector(s) by {self.criterion}")
        fit.details['criterion_scores'] = scores
        return fit


class TrimmedBiasCorrectedEigenvector(TrimmedEigenvector):
    """Trimmed eigenvector approach on mean-centred data, with intercept"""

    method_name = 'Trimmed Bias-Corrected Eigenvector Approach'
    centered = True
