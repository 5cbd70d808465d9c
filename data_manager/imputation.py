"""Imputation of missing model forecasts"""

import logging
from typing import Optional

import numpy as np
import pandas as pd
from statsmodels.imputation.mice import MICEData

from config.model_config import IMPUTATION_DEFAULTS

logger = logging.getLogger(__name__)


class Imputer:
    """Fills missing values in a forecast matrix (rows = time, columns = models)"""

    def impute(self, frame: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError


class InterpolationImputer(Imputer):
    """Per-model interpolation over time; edges are filled with the nearest observed value"""

    def __init__(self, method: str = 'linear'):
        self.method = method

    def impute(self, frame: pd.DataFrame) -> pd.DataFrame:
        return frame.interpolate(method=self.method, axis=0).ffill().bfill()


class MICEImputer(Imputer):
    """
    Multivariate imputation by chained equations (statsmodels MICEData).

    Each model's missing forecasts are predicted from the other models'
    forecasts at the same point, cycling over models for n_iterations.
    """

    def __init__(self,
                 n_iterations: int = IMPUTATION_DEFAULTS['mice_iterations'],
                 k_pmm: int = IMPUTATION_DEFAULTS['mice_k_pmm'],
                 random_seed: Optional[int] = IMPUTATION_DEFAULTS['random_seed']):
        self.n_iterations = n_iterations
        self.k_pmm = k_pmm
        self.random_seed = random_seed

    def impute(self, frame: pd.DataFrame) -> pd.DataFrame:
        if not frame.isna().any().any():
            return frame.copy()

        # MICEData discards rows with nothing observed; those are interpolated afterwards
        empty_rows = frame.isna().all(axis=1)

        # MICEData builds formulas from column names, so use plain identifiers
        columns = list(frame.columns)
        data = frame.loc[~empty_rows].reset_index(drop=True)
        data.columns = [f"model{i}" for i in range(len(columns))]

        # MICEData draws from the global numpy RNG; the caller's state is restored afterwards
        state = np.random.get_state()
        try:
            if self.random_seed is not None:
                np.random.seed(self.random_seed)
            mice_data = MICEData(data, k_pmm=self.k_pmm)
            mice_data.update_all(self.n_iterations)
        finally:
            np.random.set_state(state)

        imputed = frame.copy()
        imputed.loc[~empty_rows] = mice_data.data.values
        if empty_rows.any():
            imputed = InterpolationImputer().impute(imputed)

        logger.info(
            f"MICE imputed {int(frame.isna().sum().sum())} values "
            f"over {self.n_iterations} iterations"
        )
        return imputed


IMPUTERS = {
    'mice': MICEImputer,
    'interpolate': InterpolationImputer,
}
