"""Exceptions and warnings raised by forecast combination"""


class CombinationError(Exception):
    """Base class for forecast combination errors"""


class InvalidInputError(CombinationError, ValueError):
    """Malformed or inconsistent input data (bundle construction, applier input)"""


class NotFitError(CombinationError):
    """Estimator cannot be fit with the available data"""


class LengthMismatchError(CombinationError, ValueError):
    """Predicted and actual sequences differ in length"""


class CollinearityWarning(UserWarning):
    """Forecast columns are (near-)collinear"""
