"""
Data management package for forecast combination.
Handles input validation, missing-value imputation and collinearity checks.
"""

from .data_validator import ForecastValidator, prepare_bundle
from .imputation import Imputer, InterpolationImputer, MICEImputer
from .collinearity import condition_number, find_collinear_models

__all__ = [
    'ForecastValidator', 'prepare_bundle',
    'Imputer', 'InterpolationImputer', 'MICEImputer',
    'condition_number', 'find_collinear_models',
]
