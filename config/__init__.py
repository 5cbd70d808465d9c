"""
Configuration package for forecast combination.
Holds default settings shared by validation, estimation and reporting.
"""

from .model_config import (
    VALIDATION_DEFAULTS,
    IMPUTATION_DEFAULTS,
    SOLVER_SETTINGS,
    ACCURACY_MEASURES,
    SELECTION_CRITERIA,
    DATASET_LABELS,
    DISPERSION_MEASURES,
    LOG_FORMAT,
)

__all__ = [
    'VALIDATION_DEFAULTS',
    'IMPUTATION_DEFAULTS',
    'SOLVER_SETTINGS',
    'ACCURACY_MEASURES',
    'SELECTION_CRITERIA',
    'DATASET_LABELS',
    'DISPERSION_MEASURES',
    'LOG_FORMAT',
]
