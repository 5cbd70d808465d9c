from typing import Optional
from pathlib import Path
import logging

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from combination.models import CombinationResult
from .summary import weights_frame

logger = logging.getLogger(__name__)


class CombinationVisualizer:
    """Visualization utilities for forecast combination results"""

    def __init__(self, style: str = 'seaborn-v0_8'):
        """
        Initialize visualizer

        Parameters:
        -----------
        style : str
            Matplotlib style to use. Default is 'seaborn-v0_8'.
            Available styles can be listed with `plt.style.available`
        """
        try:
            plt.style.use(style)
        except OSError:
            plt.style.use('default')
            logger.warning(f"Style '{style}' not found, using default style")

        self.colors = plt.rcParams['axes.prop_cycle'].by_key()['color']

    def plot_fit(self,
                 result: CombinationResult,
                 title: Optional[str] = None,
                 save_path: Optional[Path] = None) -> plt.Figure:
        """
        Plot actual values against the combined forecast

        Training fitted values are drawn first; when the result carries test
        forecasts they continue after the training period, separated by a
        dashed line.

        Parameters:
        -----------
        result : CombinationResult
            Output of a combination estimator
        title : str, optional
            Plot title, defaults to the method name
        save_path : Path, optional
            Path to save figure
        """
        bundle = result.input_data
        n_train = len(result.fitted_train)
        train_index = np.arange(1, n_train + 1)

        fig, ax = plt.subplots(figsize=(12, 6))
        ax.plot(train_index, bundle.actual_train, label='Actual', color=self.colors[0])
        ax.plot(train_index, result.fitted_train, label='Fitted', color=self.colors[1])

        if result.forecasts_test is not None:
            test_index = np.arange(n_train + 1, n_train + len(result.forecasts_test) + 1)
            if bundle.actual_test is not None:
                ax.plot(test_index, bundle.actual_test, color=self.colors[0])
            ax.plot(test_index, result.forecasts_test, label='Forecast', color=self.colors[2])
            ax.axvline(x=n_train + 0.5, color='k', linestyle='--', alpha=0.5)

        ax.set_xlabel('Observation')
        ax.set_ylabel('Value')
        ax.set_title(title or result.method_name)
        ax.legend()
        ax.grid(True)

        if save_path:
            fig.savefig(save_path)

        return fig

    def plot_weights(self,
                     result: CombinationResult,
                     title: Optional[str] = None,
                     save_path: Optional[Path] = None) -> plt.Figure:
        """
        Bar chart of the model weights

        Parameters:
        -----------
        result : CombinationResult
            Output of a combination estimator
        title : str, optional
            Plot title, defaults to the method name
        save_path : Path, optional
            Path to save figure
        """
        frame = weights_frame(result).reset_index()

        fig, ax = plt.subplots(figsize=(max(6, 1.2 * len(frame)), 5))
        sns.barplot(data=frame, x='model', y='weight', ax=ax, color=self.colors[0])
        ax.axhline(y=0, color='k', linewidth=0.8)
        ax.set_xlabel('Model')
        ax.set_ylabel('Weight' if result.linear else 'Average effective weight')
        ax.set_title(title or f"{result.method_name} weights")

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path)

        return fig

    def close_all(self):
        """Close all open figures"""
        plt.close('all')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_all()
