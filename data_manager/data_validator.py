"""
Validation and preprocessing of raw forecast data into ForecastBundle instances.
"""

import logging
import warnings
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from combination.errors import CollinearityWarning, InvalidInputError
from combination.models import ForecastBundle
from config.model_config import VALIDATION_DEFAULTS
from .collinearity import find_collinear_models
from .imputation import IMPUTERS, Imputer, MICEImputer

logger = logging.getLogger(__name__)

NA_STRATEGIES = ('raise', 'omit', 'impute')
COLLINEARITY_ACTIONS = (None, 'flag', 'drop')
COLLINEARITY_METHODS = ('condition', 'correlation')


class ForecastValidator:
    """Validates actuals and model forecasts and builds an immutable ForecastBundle."""

    def __init__(self,
                 na_strategy: str = VALIDATION_DEFAULTS['na_strategy'],
                 imputer: Optional[Union[Imputer, str]] = None,
                 collinearity_action: Optional[str] = VALIDATION_DEFAULTS['collinearity_action'],
                 collinearity_method: str = VALIDATION_DEFAULTS['collinearity_method'],
                 condition_threshold: float = VALIDATION_DEFAULTS['condition_threshold'],
                 correlation_threshold: float = VALIDATION_DEFAULTS['correlation_threshold'],
                 criterion: str = VALIDATION_DEFAULTS['criterion'],
                 min_models: int = VALIDATION_DEFAULTS['min_models']):
        if na_strategy not in NA_STRATEGIES:
            raise ValueError(f"Unknown na_strategy: {na_strategy}. Expected one of {NA_STRATEGIES}")
        if collinearity_action not in COLLINEARITY_ACTIONS:
            raise ValueError(
                f"Unknown collinearity_action: {collinearity_action}. "
                f"Expected one of {COLLINEARITY_ACTIONS}"
            )
        if collinearity_method not in COLLINEARITY_METHODS:
            raise ValueError(
                f"Unknown collinearity_method: {collinearity_method}. "
                f"Expected one of {COLLINEARITY_METHODS}"
            )

        self.na_strategy = na_strategy
        self.imputer = self._resolve_imputer(imputer)
        self.collinearity_action = collinearity_action
        self.collinearity_method = collinearity_method
        self.condition_threshold = condition_threshold
        self.correlation_threshold = correlation_threshold
        self.criterion = criterion
        self.min_models = min_models

    def validate(self,
                 actual_train,
                 forecasts_train,
                 actual_test=None,
                 forecasts_test=None,
                 model_names: Optional[Sequence[str]] = None) -> ForecastBundle:
        """
        Validate inputs and return a ForecastBundle.

        Args:
            actual_train: Observed values for the training period (length T)
            forecasts_train: Model forecasts for the training period (T x N)
            actual_test: Optional observed values for the test period
            forecasts_test: Optional model forecasts for the test period (T' x N)
            model_names: Optional names for the N models

        Returns:
            ForecastBundle with missing values and collinearity handled
            according to the validator's settings
        """
        try:
            train, names = self._forecast_frame(forecasts_train, model_names, 'forecasts_train')
            actual = self._actual_series(actual_train, 'actual_train')
            if len(actual) != len(train):
                raise InvalidInputError(
                    f"forecasts_train has {len(train)} rows but actual_train "
                    f"has {len(actual)} observations"
                )

            test, test_actual = None, None
            if forecasts_test is not None:
                test, _ = self._forecast_frame(self._align_test_columns(forecasts_test, names),
                                               names, 'forecasts_test')
                if actual_test is not None:
                    test_actual = self._actual_series(actual_test, 'actual_test')
                    if len(test_actual) != len(test):
                        raise InvalidInputError(
                            f"actual_test has {len(test_actual)} observations but "
                            f"forecasts_test has {len(test)} rows"
                        )
            elif actual_test is not None:
                raise InvalidInputError("actual_test given without forecasts_test")

            self._check_empty_columns(train, 'forecasts_train')
            actual, train = self._handle_missing(actual, train, 'training')
            if len(train) == 0:
                raise InvalidInputError("No complete training observations remain")

            if test is not None:
                self._check_empty_columns(test, 'forecasts_test')
                test_actual, test = self._handle_missing(test_actual, test, 'test')
                if len(test) == 0:
                    raise InvalidInputError("No complete test observations remain")

            collinear = self._find_collinear(actual, train, names)
            dropped: List[str] = []
            if collinear and self.collinearity_action == 'drop':
                dropped = collinear
                train = train.drop(columns=dropped)
                if test is not None:
                    test = test.drop(columns=dropped)
                names = [name for name in names if name not in dropped]

            if len(names) < self.min_models:
                raise InvalidInputError(
                    f"At least {self.min_models} usable forecast columns are required, "
                    f"got {len(names)}"
                )

            bundle = ForecastBundle(
                actual_train=actual.values,
                forecasts_train=train.values,
                model_names=tuple(names),
                actual_test=test_actual.values if test_actual is not None else None,
                forecasts_test=test.values if test is not None else None,
                collinear_models=tuple(collinear),
                dropped_models=tuple(dropped),
            )
        except InvalidInputError as e:
            logger.error(f"Forecast validation failed: {str(e)}")
            raise

        logger.info(f"""
        Forecast data validated:
        Models: {bundle.n_models} ({', '.join(bundle.model_names)})
        Training observations: {bundle.n_obs}
        Test observations: {len(bundle.forecasts_test) if bundle.has_test else 0}
        Collinear models: {list(bundle.collinear_models) or 'none'}
        Dropped models: {list(bundle.dropped_models) or 'none'}
        """)
        return bundle

    def _forecast_frame(self, forecasts, model_names, name: str) -> Tuple[pd.DataFrame, List[str]]:
        """Convert a forecast matrix to a float DataFrame labelled with model names."""
        if isinstance(forecasts, pd.DataFrame):
            default_names = [str(column) for column in forecasts.columns]
            values = forecasts.values
        else:
            values = np.asarray(forecasts)
            default_names = None

        try:
            values = np.array(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"{name} must be numeric: {str(e)}")
        if values.ndim != 2:
            raise InvalidInputError(
                f"{name} must be a two-dimensional matrix (rows = time, columns = models), "
                f"got shape {values.shape}"
            )

        n_models = values.shape[1]
        if model_names is not None:
            names = [str(model) for model in model_names]
        elif default_names is not None:
            names = default_names
        else:
            names = [f"model_{i + 1}" for i in range(n_models)]

        if len(names) != n_models:
            raise InvalidInputError(f"Got {len(names)} model names for {n_models} columns in {name}")
        if len(set(names)) != len(names):
            raise InvalidInputError(f"Model names must be unique: {names}")

        values[~np.isfinite(values)] = np.nan
        return pd.DataFrame(values, columns=names), names

    @staticmethod
    def _resolve_imputer(imputer) -> Imputer:
        if imputer is None:
            return MICEImputer()
        if isinstance(imputer, str):
            if imputer not in IMPUTERS:
                raise ValueError(f"Unknown imputer: {imputer}. Expected one of {list(IMPUTERS)}")
            return IMPUTERS[imputer]()
        return imputer

    @staticmethod
    def _align_test_columns(forecasts_test, names: List[str]):
        """Reorder a test DataFrame to the training model order by column label."""
        if not isinstance(forecasts_test, pd.DataFrame):
            return forecasts_test
        labels = [str(column) for column in forecasts_test.columns]
        if sorted(labels) != sorted(names):
            raise InvalidInputError(
                f"forecasts_test columns {labels} do not match the model names {names}"
            )
        aligned = forecasts_test.copy()
        aligned.columns = labels
        return aligned[names]

    def _actual_series(self, actual, name: str) -> pd.Series:
        values = actual.values if isinstance(actual, (pd.Series, pd.DataFrame)) else actual
        try:
            values = np.array(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"{name} must be numeric: {str(e)}")
        if values.ndim == 2 and values.shape[1] == 1:
            values = values.ravel()
        if values.ndim != 1:
            raise InvalidInputError(f"{name} must be one-dimensional, got shape {values.shape}")

        values[~np.isfinite(values)] = np.nan
        return pd.Series(values)

    def _check_empty_columns(self, frame: pd.DataFrame, name: str):
        empty = [column for column in frame.columns if frame[column].isna().all()]
        if empty:
            raise InvalidInputError(f"{name} has columns with no observed values: {empty}")

    def _handle_missing(self, actual: Optional[pd.Series], frame: pd.DataFrame,
                        dataset: str) -> Tuple[Optional[pd.Series], pd.DataFrame]:
        """Apply the missing-value strategy to one dataset."""
        missing_forecasts = frame.isna().any(axis=1)
        missing_actual = actual.isna() if actual is not None else pd.Series(False, index=frame.index)
        if not missing_forecasts.any() and not missing_actual.any():
            return actual, frame

        n_missing = int(frame.isna().sum().sum()) + int(missing_actual.sum())
        if self.na_strategy == 'raise':
            raise InvalidInputError(
                f"The {dataset} data has {n_missing} missing values; "
                f"use na_strategy='omit' or 'impute' to handle them"
            )

        if self.na_strategy == 'omit':
            keep = ~(missing_forecasts | missing_actual)
            self._warn(f"Dropped {int((~keep).sum())} incomplete {dataset} rows")
        else:
            if missing_forecasts.any():
                frame = self.imputer.impute(frame)
                if frame.isna().any().any():
                    raise InvalidInputError(f"Imputation left missing values in the {dataset} forecasts")
            keep = ~missing_actual
            if missing_actual.any():
                self._warn(
                    f"Dropped {int(missing_actual.sum())} {dataset} rows with a missing "
                    f"actual value (actuals are not imputed)"
                )

        frame = frame.loc[keep].reset_index(drop=True)
        if actual is not None:
            actual = actual.loc[keep].reset_index(drop=True)
        return actual, frame

    def _find_collinear(self, actual: pd.Series, frame: pd.DataFrame, names: List[str]) -> List[str]:
        if self.collinearity_action is None:
            return []

        collinear = find_collinear_models(
            actual.values,
            frame.values,
            names,
            method=self.collinearity_method,
            condition_threshold=self.condition_threshold,
            correlation_threshold=self.correlation_threshold,
            criterion=self.criterion,
        )
        if collinear:
            verb = 'dropping' if self.collinearity_action == 'drop' else 'flagged'
            self._warn(f"Collinear forecasts detected ({verb}): {collinear}", CollinearityWarning)
        return collinear

    @staticmethod
    def _warn(message: str, category=UserWarning):
        logger.warning(message)
        warnings.warn(message, category, stacklevel=3)


def prepare_bundle(actual_train,
                   forecasts_train,
                   actual_test=None,
                   forecasts_test=None,
                   model_names: Optional[Sequence[str]] = None,
                   **validator_options) -> ForecastBundle:
    """Validate raw inputs with a ForecastValidator built from validator_options."""
    validator = ForecastValidator(**validator_options)
    return validator.validate(
        actual_train,
        forecasts_train,
        actual_test=actual_test,
        forecasts_test=forecasts_test,
        model_names=model_names,
    )
