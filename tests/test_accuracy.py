import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np

from combination.accuracy import compute_accuracy, criterion_value, naive_scale
from combination.errors import LengthMismatchError
from config.model_config import ACCURACY_MEASURES


def test_perfect_prediction():
    """All error measures vanish when predictions equal actuals"""
    actual = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    record = compute_accuracy(actual.copy(), actual, 'Training Set')

    assert record.label == 'Training Set'
    assert record.n_obs == 5
    for measure, value in record.as_dict().items():
        assert value == 0.0, measure


def test_known_values():
    actual = np.array([1.0, 2.0, 3.0, 4.0])
    predicted = np.array([2.0, 2.0, 2.0, 2.0])
    record = compute_accuracy(predicted, actual, 'Training Set')

    assert record.me == pytest.approx(0.5)
    assert record.rmse == pytest.approx(np.sqrt(1.5))
    assert record.mae == pytest.approx(1.0)
    assert record.mpe == pytest.approx((-100 + 0 + 100 / 3 + 50) / 4)
    assert record.mape == pytest.approx((100 + 0 + 100 / 3 + 50) / 4)
    assert record.mase == pytest.approx(1.0)
    assert record.acf1 == pytest.approx(0.25)
    assert record.theils_u == pytest.approx(5 / 7)


def test_explicit_scale():
    actual = np.array([1.0, 2.0, 3.0, 4.0])
    predicted = np.array([2.0, 2.0, 2.0, 2.0])
    record = compute_accuracy(predicted, actual, 'Test Set', scale=4.0)
    assert record.mase == pytest.approx(0.25)


def test_record_keys():
    actual = np.array([1.0, 2.0, 4.0])
    record = compute_accuracy(actual + 1, actual, 'Training Set')

    assert list(record.as_dict()) == ACCURACY_MEASURES
    frame = record.to_frame()
    assert list(frame.index) == ['Training Set']
    assert list(frame.columns) == ACCURACY_MEASURES


def test_length_mismatch():
    with pytest.raises(LengthMismatchError):
        compute_accuracy([1.0, 2.0], [1.0, 2.0, 3.0], 'Training Set')
    with pytest.raises(LengthMismatchError):
        compute_accuracy([], [], 'Training Set')
    # LengthMismatchError is also a ValueError
    with pytest.raises(ValueError):
        compute_accuracy([1.0], [1.0, 2.0], 'Training Set')


def test_naive_scale():
    assert naive_scale([1.0, 3.0, 2.0]) == pytest.approx(1.5)
    assert np.isnan(naive_scale([1.0]))


def test_criterion_value():
    actual = np.array([1.0, 2.0, 3.0, 4.0])
    predicted = np.array([2.0, 2.0, 2.0, 2.0])

    assert criterion_value(predicted, actual, 'RMSE') == pytest.approx(np.sqrt(1.5))
    assert criterion_value(predicted, actual, 'MAE') == pytest.approx(1.0)
    with pytest.raises(ValueError):
        criterion_value(predicted, actual, 'ME')
