import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np

from combination import (
    ForecastBundle,
    InverseRank,
    BatesGranger,
    InverseMSE,
    NewboldGranger,
)
from combination.eigenvector import error_moment_matrix


@pytest.fixture
def offset_bundle():
    """Models with constant errors of size 1, 2 and 3 (alternating sign)"""
    actual = np.arange(1.0, 9.0)
    signs = np.where(np.arange(8) % 2 == 0, 1.0, -1.0)
    forecasts = actual[:, None] + signs[:, None] * np.array([1.0, 2.0, 3.0])
    return ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b', 'c'))


@pytest.fixture
def random_bundle():
    np.random.seed(42)
    actual = np.random.normal(0, 1, 200)
    noise = np.random.normal(0, 1, (200, 3)) * np.array([0.5, 1.0, 2.0])
    return ForecastBundle(
        actual_train=actual,
        forecasts_train=actual[:, None] + noise,
        model_names=('a', 'b', 'c'),
    )


def test_inverse_rank(offset_bundle):
    result = InverseRank().estimate(offset_bundle)

    np.testing.assert_allclose(result.weights, [6 / 11, 3 / 11, 2 / 11])
    np.testing.assert_allclose(result.details['ranks'], [1, 2, 3])
    assert result.intercept is None


def test_inverse_rank_ties():
    actual = np.arange(1.0, 6.0)
    forecasts = actual[:, None] + np.array([1.0, 1.0, 2.0])
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b', 'c'))

    result = InverseRank().estimate(bundle)
    # Tied models share the average rank 1.5
    np.testing.assert_allclose(result.weights, np.array([2 / 3, 2 / 3, 1 / 3]) / (5 / 3))


def test_inverse_mse(offset_bundle):
    result = InverseMSE().estimate(offset_bundle)
    expected = np.array([1.0, 1 / 4, 1 / 9])
    np.testing.assert_allclose(result.weights, expected / expected.sum())


def test_bates_granger():
    np.random.seed(42)
    actual = np.random.normal(0, 1, 30)
    shocks = np.random.normal(0, 1, 30)
    forecasts = actual[:, None] - shocks[:, None] * np.array([1.0, 2.0])
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'))

    result = BatesGranger().estimate(bundle)
    np.testing.assert_allclose(result.weights, [0.8, 0.2])


def test_bates_granger_zero_variance(offset_bundle):
    """A model whose error never varies takes all the weight"""
    actual = np.asarray(offset_bundle.actual_train)
    forecasts = np.column_stack([actual + 0.5, offset_bundle.forecasts_train[:, 1]])
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('biased', 'noisy'))

    result = BatesGranger().estimate(bundle)
    np.testing.assert_allclose(result.weights, [1.0, 0.0])


def test_newbold_granger(random_bundle):
    result = NewboldGranger().estimate(random_bundle)

    moment_matrix = error_moment_matrix(random_bundle.actual_train, random_bundle.forecasts_train)
    solved = np.linalg.solve(moment_matrix, np.ones(3))
    np.testing.assert_allclose(result.weights, solved / solved.sum())
    assert np.isclose(np.sum(result.weights), 1.0)
    # The most accurate model gets the largest weight
    assert np.argmax(result.weights) == 0


def test_weights_sum_to_one(random_bundle):
    for estimator in (InverseRank(), BatesGranger(), InverseMSE(), NewboldGranger()):
        result = estimator.estimate(random_bundle)
        assert np.isclose(np.sum(result.weights), 1.0), result.method_name
        assert len(result.weights) == len(result.models)
