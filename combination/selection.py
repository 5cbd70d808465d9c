"""Fit several combination methods and keep the best one"""

import logging
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from config.model_config import SELECTION_CRITERIA
from utils.progress import ProgressMonitor
from .errors import NotFitError
from .models import CombinationResult, ForecastBundle
from .registry import METHODS, get_estimator

logger = logging.getLogger(__name__)


def auto_combine(bundle: ForecastBundle,
                 criterion: str = 'RMSE',
                 methods: Optional[Iterable[str]] = None,
                 options: Optional[Dict[str, dict]] = None,
                 show_progress: bool = False) -> Tuple[CombinationResult, pd.DataFrame]:
    """
    Run each combination method and select the best by training accuracy

    Parameters:
    - bundle: Validated forecast data
    - criterion: 'RMSE', 'MAE' or 'MAPE' (training set)
    - methods: Registry keys to try; all registered methods by default
    - options: Per-method constructor options, e.g. {'TA': {'trim_factor': 0.1}}
    - show_progress: Display a progress bar

    Returns the best CombinationResult and a ranking DataFrame with one row
    per fitted method, best first. Methods that cannot be fit are skipped.
    """
    if criterion not in SELECTION_CRITERIA:
        raise ValueError(
            f"Unknown criterion: {criterion}. Expected one of: {list(SELECTION_CRITERIA)}"
        )
    keys = list(methods) if methods is not None else list(METHODS)
    options = options or {}

    results = {}
    rows = []
    monitor = ProgressMonitor(total=len(keys), desc="Combination methods", disable=not show_progress)
    try:
        for key in keys:
            estimator = get_estimator(key, **options.get(key, {}))
            try:
                result = estimator.estimate(bundle)
            except NotFitError as e:
                logger.warning(f"Skipping {key}: {str(e)}")
                monitor.update()
                continue

            results[key] = result
            train_scores = result.accuracy_train.as_dict()
            row = {
                'method': key,
                'method_name': result.method_name,
                f'train_{criterion}': train_scores[criterion],
            }
            if result.accuracy_test is not None:
                row[f'test_{criterion}'] = result.accuracy_test.as_dict()[criterion]
            rows.append(row)
            monitor.update()
    finally:
        monitor.close()

    if not rows:
        raise NotFitError("No combination method could be fit")

    ranking = (
        pd.DataFrame(rows)
        .sort_values(f'train_{criterion}', kind='mergesort')
        .reset_index(drop=True)
    )
    best_key = ranking['method'].iloc[0]

    logger.info(f"""
    Automatic combination selection:
    Criterion: {criterion} (training set)
    Methods fitted: {len(rows)} of {len(keys)}
    Best method: {best_key} ({results[best_key].method_name})
    Best {criterion}: {ranking[f'train_{criterion}'].iloc[0]:.4f}
    """)

    return results[best_key], ranking
