import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np

from combination import (
    CollinearityWarning,
    ForecastBundle,
    NotFitError,
    OrdinaryLeastSquares,
    LeastAbsoluteDeviation,
    ConstrainedLeastSquares,
    CompleteSubsetRegression,
    predict,
)
from combination.solvers import LinearFit, LinearSolver, QuadraticProgramSolver


class FixedLinearSolver(LinearSolver):
    """Returns preset coefficients regardless of the data"""

    def __init__(self, params):
        self.params = np.asarray(params, dtype=float)

    def fit(self, design, target):
        return LinearFit(params=self.params, fitted=design @ self.params, rank=design.shape[1])


class FixedQuadraticSolver(QuadraticProgramSolver):

    def __init__(self, weights):
        self.weights = np.asarray(weights, dtype=float)
        self.calls = []

    def solve(self, P, q, nonnegative=True):
        self.calls.append(nonnegative)
        return self.weights


@pytest.fixture
def normal_forecasts():
    np.random.seed(42)
    return np.random.normal(0, 1, (500, 3))


@pytest.fixture
def linear_bundle(normal_forecasts):
    """Actuals that are an exact affine combination of two forecasts"""
    actual = 0.5 + 0.3 * normal_forecasts[:, 0] + 0.7 * normal_forecasts[:, 1]
    return ForecastBundle(
        actual_train=actual[:400],
        forecasts_train=normal_forecasts[:400],
        model_names=('a', 'b', 'c'),
        actual_test=actual[400:],
        forecasts_test=normal_forecasts[400:],
    )


def test_ols_recovers_coefficients(linear_bundle):
    result = OrdinaryLeastSquares().estimate(linear_bundle)

    np.testing.assert_allclose(result.weights, [0.3, 0.7, 0.0], atol=1e-8)
    assert result.intercept == pytest.approx(0.5)
    np.testing.assert_allclose(result.fitted_train, linear_bundle.actual_train, atol=1e-8)
    assert result.accuracy_test.rmse == pytest.approx(0.0, abs=1e-8)
    assert not result.details['rank_deficient']


def test_ols_collinear_forecasts():
    """Rank-deficient design: warn and return the minimum-norm solution"""
    bundle = ForecastBundle(
        actual_train=np.array([1.0, 2.0, 3.0, 4.0, 5.0]),
        forecasts_train=np.array([[1.0, 2.0], [2.0, 3.0], [3.0, 4.0], [4.0, 5.0], [5.0, 6.0]]),
        model_names=('f1', 'f2'),
    )
    with pytest.warns(CollinearityWarning):
        result = OrdinaryLeastSquares().estimate(bundle)

    assert result.intercept == pytest.approx(-1 / 3)
    np.testing.assert_allclose(result.weights, [2 / 3, 1 / 3])
    np.testing.assert_allclose(result.fitted_train, bundle.actual_train)
    assert result.details['rank_deficient']
    assert result.details['rank'] == 2


def test_ols_injected_solver(linear_bundle):
    result = OrdinaryLeastSquares(solver=FixedLinearSolver([1.0, 0.2, 0.3, 0.5])).estimate(linear_bundle)

    np.testing.assert_allclose(result.weights, [0.2, 0.3, 0.5])
    assert result.intercept == pytest.approx(1.0)
    np.testing.assert_allclose(predict(result, [[1.0, 1.0, 1.0]]), [2.0])


def test_lad_ignores_outlier(normal_forecasts):
    forecasts = normal_forecasts[:40, :2]
    actual = forecasts[:, 0].copy()
    actual[7] += 100.0
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'))

    lad = LeastAbsoluteDeviation().estimate(bundle)
    ols = OrdinaryLeastSquares().estimate(bundle)

    np.testing.assert_allclose(lad.weights, [1.0, 0.0], atol=1e-6)
    assert lad.intercept == pytest.approx(0.0, abs=1e-6)
    # OLS is pulled towards the outlier
    assert abs(ols.intercept) > 0.5


def test_cls_simplex(normal_forecasts):
    actual = 0.6 * normal_forecasts[:, 0] + 0.4 * normal_forecasts[:, 1]
    bundle = ForecastBundle(actual_train=actual, forecasts_train=normal_forecasts, model_names=('a', 'b', 'c'))

    result = ConstrainedLeastSquares().estimate(bundle)

    np.testing.assert_allclose(result.weights, [0.6, 0.4, 0.0], atol=1e-4)
    assert np.isclose(np.sum(result.weights), 1.0)
    assert np.all(result.weights >= 0)
    assert result.intercept is None


def test_cls_nonnegativity_binds(normal_forecasts):
    actual = 1.5 * normal_forecasts[:, 0] - 0.5 * normal_forecasts[:, 1]
    bundle = ForecastBundle(actual_train=actual, forecasts_train=normal_forecasts, model_names=('a', 'b', 'c'))

    constrained = ConstrainedLeastSquares().estimate(bundle)
    unconstrained = ConstrainedLeastSquares(nonnegative=False).estimate(bundle)

    assert np.all(constrained.weights >= 0)
    assert np.isclose(np.sum(constrained.weights), 1.0)
    np.testing.assert_allclose(unconstrained.weights, [1.5, -0.5, 0.0], atol=1e-4)


def test_cls_injected_solver(linear_bundle):
    solver = FixedQuadraticSolver([0.5, 0.5, 0.0])
    result = ConstrainedLeastSquares(nonnegative=False, solver=solver).estimate(linear_bundle)

    np.testing.assert_allclose(result.weights, [0.5, 0.5, 0.0])
    assert solver.calls == [False]


def test_csr_full_subset_is_ols(linear_bundle):
    csr = CompleteSubsetRegression(subset_size=3).estimate(linear_bundle)
    ols = OrdinaryLeastSquares().estimate(linear_bundle)

    np.testing.assert_allclose(csr.weights, ols.weights)
    assert csr.intercept == pytest.approx(ols.intercept)
    assert csr.details['n_subsets'] == 1


def test_csr_single_models(linear_bundle):
    """Size-1 subsets average the univariate regressions"""
    result = CompleteSubsetRegression(subset_size=1).estimate(linear_bundle)

    slopes = []
    intercepts = []
    for i in range(3):
        design = np.column_stack([np.ones(linear_bundle.n_obs), linear_bundle.forecasts_train[:, i]])
        params = np.linalg.lstsq(design, linear_bundle.actual_train, rcond=None)[0]
        intercepts.append(params[0])
        slopes.append(params[1])

    np.testing.assert_allclose(result.weights, np.array(slopes) / 3)
    assert result.intercept == pytest.approx(np.mean(intercepts))


def test_csr_size_search(linear_bundle):
    result = CompleteSubsetRegression().estimate(linear_bundle)

    assert set(result.details['criterion_scores']) == {1, 2}
    # Only size-2 subsets contain the exact pair
    assert result.details['subset_size'] == 2


def test_csr_invalid_size(linear_bundle):
    with pytest.raises(NotFitError):
        CompleteSubsetRegression(subset_size=4).estimate(linear_bundle)
    with pytest.raises(ValueError):
        CompleteSubsetRegression(subset_size=0)


def test_insufficient_observations():
    bundle = ForecastBundle(
        actual_train=np.array([1.0, 2.0, 3.0]),
        forecasts_train=np.array([[1.0, 2.0, 0.5], [2.0, 1.0, 3.0], [3.0, 4.0, 2.0]]),
        model_names=('a', 'b', 'c'),
    )
    for estimator in (OrdinaryLeastSquares(), LeastAbsoluteDeviation(),
                      ConstrainedLeastSquares(), CompleteSubsetRegression()):
        with pytest.raises(NotFitError):
            estimator.estimate(bundle)
