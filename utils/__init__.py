"""Utility functions and classes for forecast combination"""

from .progress import ProgressMonitor
from .logging_config import setup_logging

__all__ = ['ProgressMonitor', 'setup_logging']
