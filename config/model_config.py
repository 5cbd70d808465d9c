"""Default settings for validation, combination estimators and reporting"""

# Input validation / preprocessing
VALIDATION_DEFAULTS = {
    'na_strategy': 'raise',           # One of: 'raise', 'omit', 'impute'
    'collinearity_action': 'flag',    # One of: None, 'flag', 'drop'
    'collinearity_method': 'condition',  # One of: 'condition', 'correlation'
    'condition_threshold': 1e6,       # Column-scaled condition number
    'correlation_threshold': 0.9999,  # Absolute pairwise correlation
    'criterion': 'RMSE',              # Used to pick which collinear model goes
    'min_models': 2,
}

# Imputation
IMPUTATION_DEFAULTS = {
    'mice_iterations': 10,
    'mice_k_pmm': 20,
    'random_seed': 42,
}

# Numerical solvers
SOLVER_SETTINGS = {
    'qp_maxiter': 1000,
    'qp_ftol': 1e-10,
    'constraint_tol': 1e-8,
    'eigen_tol': 1e-12,   # Relative cutoff for treating eigenvalues as zero
    'rank_tol': None,     # None lets numpy pick the matrix_rank tolerance
}

# Accuracy statistics, in reporting order
ACCURACY_MEASURES = ['ME', 'RMSE', 'MAE', 'MPE', 'MAPE', 'MASE', 'ACF1', "Theil's U"]

# Criteria usable for parameter search and automatic selection
SELECTION_CRITERIA = ('RMSE', 'MAE', 'MAPE')

DATASET_LABELS = {
    'train': 'Training Set',
    'test': 'Test Set',
}

DISPERSION_MEASURES = ('SD', 'IQR', 'Range')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
