"""Data models shared by validation, estimation and reporting."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from config.model_config import ACCURACY_MEASURES, DATASET_LABELS
from .errors import InvalidInputError


def _frozen_array(values, ndim: int, name: str) -> np.ndarray:
    """Copy values into a read-only float array of the given dimension"""
    try:
        array = np.array(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be numeric: {str(e)}")
    if array.ndim != ndim:
        raise InvalidInputError(
            f"{name} must be {ndim}-dimensional, got shape {array.shape}"
        )
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class ForecastBundle:
    """Validated training (and optional test) data for forecast combination"""
    actual_train: np.ndarray      # Shape: (T,)
    forecasts_train: np.ndarray   # Shape: (T, N), one column per model
    model_names: Tuple[str, ...]
    actual_test: Optional[np.ndarray] = None     # Shape: (T',)
    forecasts_test: Optional[np.ndarray] = None  # Shape: (T', N)
    collinear_models: Tuple[str, ...] = ()
    dropped_models: Tuple[str, ...] = ()

    def __post_init__(self):
        actual_train = _frozen_array(self.actual_train, 1, 'actual_train')
        forecasts_train = _frozen_array(self.forecasts_train, 2, 'forecasts_train')
        names = tuple(str(name) for name in self.model_names)

        if forecasts_train.shape[0] != len(actual_train):
            raise InvalidInputError(
                f"forecasts_train has {forecasts_train.shape[0]} rows but "
                f"actual_train has {len(actual_train)} observations"
            )
        if len(names) != forecasts_train.shape[1]:
            raise InvalidInputError(
                f"Got {len(names)} model names for {forecasts_train.shape[1]} forecast columns"
            )
        if len(set(names)) != len(names):
            raise InvalidInputError(f"Model names must be unique: {list(names)}")

        forecasts_test = None
        if self.forecasts_test is not None:
            forecasts_test = _frozen_array(self.forecasts_test, 2, 'forecasts_test')
            if forecasts_test.shape[1] != forecasts_train.shape[1]:
                raise InvalidInputError(
                    f"forecasts_test has {forecasts_test.shape[1]} columns, "
                    f"expected {forecasts_train.shape[1]}"
                )

        actual_test = None
        if self.actual_test is not None:
            if forecasts_test is None:
                raise InvalidInputError("actual_test given without forecasts_test")
            actual_test = _frozen_array(self.actual_test, 1, 'actual_test')
            if len(actual_test) != forecasts_test.shape[0]:
                raise InvalidInputError(
                    f"actual_test has {len(actual_test)} observations but "
                    f"forecasts_test has {forecasts_test.shape[0]} rows"
                )

        object.__setattr__(self, 'actual_train', actual_train)
        object.__setattr__(self, 'forecasts_train', forecasts_train)
        object.__setattr__(self, 'model_names', names)
        object.__setattr__(self, 'forecasts_test', forecasts_test)
        object.__setattr__(self, 'actual_test', actual_test)
        object.__setattr__(self, 'collinear_models', tuple(self.collinear_models))
        object.__setattr__(self, 'dropped_models', tuple(self.dropped_models))

    @property
    def n_obs(self) -> int:
        return self.forecasts_train.shape[0]

    @property
    def n_models(self) -> int:
        return self.forecasts_train.shape[1]

    @property
    def has_test(self) -> bool:
        return self.forecasts_test is not None

    def to_frame(self, dataset: str = 'train') -> pd.DataFrame:
        """Forecasts (plus an 'actual' column when available) as a DataFrame"""
        if dataset == 'train':
            forecasts, actual = self.forecasts_train, self.actual_train
        elif dataset == 'test':
            if not self.has_test:
                raise ValueError("Bundle has no test data")
            forecasts, actual = self.forecasts_test, self.actual_test
        else:
            raise ValueError(f"Unknown dataset: {dataset}. Expected 'train' or 'test'")

        frame = pd.DataFrame(forecasts, columns=list(self.model_names))
        if actual is not None:
            frame.insert(0, 'actual', actual)
        return frame


@dataclass(frozen=True)
class AccuracyRecord:
    """Forecast accuracy statistics for one dataset"""
    label: str
    n_obs: int
    me: float
    rmse: float
    mae: float
    mpe: float
    mape: float
    mase: float
    acf1: float
    theils_u: float

    def as_dict(self) -> Dict[str, float]:
        values = [self.me, self.rmse, self.mae, self.mpe, self.mape,
                  self.mase, self.acf1, self.theils_u]
        return dict(zip(ACCURACY_MEASURES, values))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([self.as_dict()], index=[self.label])


@dataclass(frozen=True)
class CombinationResult:
    """Output of a single combination estimator run"""
    method_name: str
    models: Tuple[str, ...]
    weights: np.ndarray
    fitted_train: np.ndarray
    accuracy_train: AccuracyRecord
    input_data: ForecastBundle
    intercept: Optional[float] = None
    forecasts_test: Optional[np.ndarray] = None
    accuracy_test: Optional[AccuracyRecord] = None
    linear: bool = True  # False: weights are averages of row-wise effective weights
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        weights = _frozen_array(self.weights, 1, 'weights')
        if len(weights) != len(self.models):
            raise InvalidInputError(
                f"Got {len(weights)} weights for {len(self.models)} models"
            )
        object.__setattr__(self, 'models', tuple(self.models))
        object.__setattr__(self, 'weights', weights)
        object.__setattr__(self, 'fitted_train', _frozen_array(self.fitted_train, 1, 'fitted_train'))
        if self.forecasts_test is not None:
            object.__setattr__(
                self, 'forecasts_test', _frozen_array(self.forecasts_test, 1, 'forecasts_test')
            )
        if self.intercept is not None:
            object.__setattr__(self, 'intercept', float(self.intercept))
        object.__setattr__(self, 'details', MappingProxyType(dict(self.details)))

    @property
    def weight_map(self) -> Dict[str, float]:
        return dict(zip(self.models, self.weights.tolist()))

    def accuracy_frame(self) -> pd.DataFrame:
        """Training (and test) accuracy stacked into one DataFrame"""
        frames = [self.accuracy_train.to_frame()]
        if self.accuracy_test is not None:
            frames.append(self.accuracy_test.to_frame())
        return pd.concat(frames)


TRAIN_LABEL = DATASET_LABELS['train']
TEST_LABEL = DATASET_LABELS['test']
