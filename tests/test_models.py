import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import dataclasses

import pytest
import numpy as np

from combination import ForecastBundle, InvalidInputError, SimpleAverage, apply_weights


@pytest.fixture
def sample_arrays():
    np.random.seed(42)
    actual = np.random.normal(0, 1, 12)
    forecasts = np.random.normal(0, 1, (12, 2))
    return actual, forecasts


def test_bundle_copies_inputs(sample_arrays):
    actual, forecasts = sample_arrays
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=['a', 'b'])

    actual[0] = 99.0
    assert bundle.actual_train[0] != 99.0
    assert bundle.model_names == ('a', 'b')

    with pytest.raises(ValueError):
        bundle.forecasts_train[0, 0] = 1.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        bundle.model_names = ('c', 'd')


def test_bundle_invariants(sample_arrays):
    actual, forecasts = sample_arrays

    with pytest.raises(InvalidInputError):
        ForecastBundle(actual_train=actual[:5], forecasts_train=forecasts, model_names=('a', 'b'))
    with pytest.raises(InvalidInputError):
        ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a',))
    with pytest.raises(InvalidInputError):
        ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'a'))
    with pytest.raises(InvalidInputError):
        ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'),
                       actual_test=actual[:3])
    with pytest.raises(InvalidInputError):
        ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'),
                       forecasts_test=np.ones((3, 3)))
    with pytest.raises(InvalidInputError):
        ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'),
                       actual_test=actual[:2], forecasts_test=np.ones((3, 2)))


def test_bundle_frame(sample_arrays):
    actual, forecasts = sample_arrays
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'))

    frame = bundle.to_frame()
    assert list(frame.columns) == ['actual', 'a', 'b']
    assert len(frame) == 12
    with pytest.raises(ValueError):
        bundle.to_frame('test')


def test_result_accessors(sample_arrays):
    actual, forecasts = sample_arrays
    bundle = ForecastBundle(actual_train=actual, forecasts_train=forecasts, model_names=('a', 'b'))
    result = SimpleAverage().estimate(bundle)

    assert result.weight_map == {'a': 0.5, 'b': 0.5}
    assert result.input_data is bundle
    assert list(result.accuracy_frame().index) == ['Training Set']
    with pytest.raises(TypeError):
        result.details['extra'] = 1


def test_apply_weights():
    forecasts = np.array([[1.0, 2.0], [3.0, 4.0]])
    np.testing.assert_allclose(apply_weights(forecasts, [0.5, 0.5]), [1.5, 3.5])
    np.testing.assert_allclose(apply_weights(forecasts, [1.0, 0.0], intercept=2.0), [3.0, 5.0])

    with pytest.raises(InvalidInputError):
        apply_weights(forecasts, [1.0, 0.0, 0.0])
    with pytest.raises(InvalidInputError):
        apply_weights([1.0, 2.0], [1.0])
