"""
Numerical solvers used by the combination estimators.

Each estimator receives its solver through the constructor, so the default
library-backed implementations below can be swapped for deterministic
stand-ins in tests.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import statsmodels.api as sm
from scipy import linalg, optimize

from config.model_config import SOLVER_SETTINGS
from .errors import NotFitError

logger = logging.getLogger(__name__)

@dataclass
class LinearFit:
    """Least-squares fit of target on a design matrix"""
    params: np.ndarray   # One coefficient per design column
    fitted: np.ndarray
    rank: int

class LinearSolver:
    """Least-squares regression of a target on a design matrix"""

    def fit(self, design: np.ndarray, target: np.ndarray) -> LinearFit:
        raise NotImplementedError

class EigenSolver:
    """Eigendecomposition of a symmetric matrix"""

    def decompose(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Return (eigenvalues in descending order, eigenvectors as columns)"""
        raise NotImplementedError

class QuadraticProgramSolver:
    """minimize 0.5 w'Pw + q'w subject to sum(w) = 1 (and optionally w >= 0)"""

    def solve(self, P: np.ndarray, q: np.ndarray, nonnegative: bool = True) -> np.ndarray:
        raise NotImplementedError

class LinearProgramSolver:
    """Least absolute deviations fit, solved as a linear program"""

    def solve_lad(self, design: np.ndarray, target: np.ndarray) -> np.ndarray:
        raise NotImplementedError

class StatsmodelsOLSSolver(LinearSolver):
    """OLS via statsmodels (pseudo-inverse, so rank-deficient designs still solve)"""

    def fit(self, design: np.ndarray, target: np.ndarray) -> LinearFit:
        results = sm.OLS(target, design).fit()
        rank = int(np.linalg.matrix_rank(design, tol=SOLVER_SETTINGS['rank_tol']))
        logger.debug(f"OLS fit: nobs={int(results.nobs)}, rank={rank}, r_squared={results.rsquared:.4f}")
        return LinearFit(
            params=np.asarray(results.params, dtype=float),
            fitted=np.asarray(results.fittedvalues, dtype=float),
            rank=rank,
        )

class SymmetricEigenSolver(EigenSolver):
    """scipy.linalg.eigh, reordered so the largest eigenvalue comes first"""

    def decompose(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        try:
            values, vectors = linalg.eigh(matrix)
        except linalg.LinAlgError as e:
            raise NotFitError(f"Eigendecomposition failed: {str(e)}")
        order = np.argsort(values)[::-1]
        return values[order], vectors[:, order]

class SLSQPSolver(QuadraticProgramSolver):
    """Sequential least squares programming (scipy.optimize.minimize)"""

    def __init__(self,
                 maxiter: int = SOLVER_SETTINGS['qp_maxiter'],
                 ftol: float = SOLVER_SETTINGS['qp_ftol']):
        self.maxiter = maxiter
        self.ftol = ftol

    def solve(self, P: np.ndarray, q: np.ndarray, nonnegative: bool = True) -> np.ndarray:
        n = len(q)

        def objective(w):
            return 0.5 * w @ P @ w + q @ w

        def gradient(w):
            return P @ w + q

        constraints = [{
            'type': 'eq',
            'fun': lambda w: np.sum(w) - 1.0,
            'jac': lambda w: np.ones_like(w),
        }]
        bounds = [(0.0, None) for _ in range(n)] if nonnegative else None

        result = optimize.minimize(
            objective,
            np.ones(n) / n,
            jac=gradient,
            method='SLSQP',
            bounds=bounds,
            constraints=constraints,
            options={'maxiter': self.maxiter, 'ftol': self.ftol}
        )
        weights = result.x
        if not result.success:
            # Exit mode 8 (positive directional derivative) means SLSQP cannot
            # improve further; accept the point if it is feasible
            feasible = abs(np.sum(weights) - 1.0) <= SOLVER_SETTINGS['constraint_tol'] and (
                not nonnegative or np.all(weights >= -SOLVER_SETTINGS['constraint_tol'])
            )
            if result.status != 8 or not feasible:
                raise NotFitError(f"Quadratic program did not converge: {result.message}")
            logger.warning(f"SLSQP stopped early at a feasible point: {result.message}")

        if nonnegative:
            weights = np.clip(weights, 0.0, None)
        return weights / np.sum(weights)

class HighsLADSolver(LinearProgramSolver):
    """
    LAD regression as a linear program solved with HiGHS.

    Variables are [params, u_plus, u_minus]; minimize sum(u_plus + u_minus)
    subject to design @ params + u_plus - u_minus = target, u >= 0.
    """

    def solve_lad(self, design: np.ndarray, target: np.ndarray) -> np.ndarray:
        n_obs, n_params = design.shape
        identity = np.eye(n_obs)
        cost = np.concatenate([np.zeros(n_params), np.ones(2 * n_obs)])
        A_eq = np.hstack([design, identity, -identity])
        bounds = [(None, None)] * n_params + [(0, None)] * (2 * n_obs)

        result = optimize.linprog(cost, A_eq=A_eq, b_eq=target, bounds=bounds, method='highs')
        if result.status != 0:
            raise NotFitError(f"LAD linear program failed: {result.message}")
        return result.x[:n_params]
