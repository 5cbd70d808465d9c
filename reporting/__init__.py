"""
Reporting package for forecast combination results.
Text summaries and matplotlib/seaborn charts built from CombinationResult.
"""

from .summary import summarize, weights_frame
from .visualization import CombinationVisualizer

__all__ = ['summarize', 'weights_frame', 'CombinationVisualizer']
