"""Cross-sectional dispersion of the model forecasts"""

import numpy as np

from config.model_config import DISPERSION_MEASURES
from .models import ForecastBundle


def cross_sectional_dispersion(bundle: ForecastBundle,
                               measure: str = 'SD',
                               dataset: str = 'train') -> np.ndarray:
    """
    Spread of the forecasts across models at each point

    Parameters:
    - bundle: Validated forecast data
    - measure: 'SD' (sample standard deviation), 'IQR' or 'Range'
    - dataset: 'train' or 'test'
    """
    if measure not in DISPERSION_MEASURES:
        raise ValueError(f"Unknown measure: {measure}. Expected one of: {list(DISPERSION_MEASURES)}")

    if dataset == 'train':
        forecasts = bundle.forecasts_train
    elif dataset == 'test':
        if not bundle.has_test:
            raise ValueError("Bundle has no test forecasts")
        forecasts = bundle.forecasts_test
    else:
        raise ValueError(f"Unknown dataset: {dataset}. Expected 'train' or 'test'")

    if measure == 'SD':
        return np.std(forecasts, axis=1, ddof=1)
    if measure == 'IQR':
        upper, lower = np.percentile(forecasts, [75, 25], axis=1)
        return upper - lower
    return np.ptp(forecasts, axis=1)
