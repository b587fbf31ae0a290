"""Convergence charts for repeated AQPE experiments.

This module visualizes how the belief over the phase evolves per iteration.
Single Responsibility: Transform experiment outcomes into visual charts.
Charts are shown on screen only; nothing is written to disk.
"""

import logging
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from estimation.aggregator import AggregateReport

logger = logging.getLogger(__name__)


class ConvergenceChart:
    """Generates convergence charts from an aggregate report.

    Args:
        report: AggregateReport holding every experiment outcome
        precision: Precision threshold the experiments aimed for
    """

    def __init__(self, report: AggregateReport, precision: float) -> None:
        self.report = report
        self.precision = precision

    def generate_all(self, show: bool = True, block: bool = True) -> Optional[plt.Figure]:
        """Generate all charts in a single figure with subplots.

        Args:
            show: Whether to display the figure with plt.show()
            block: Whether plt.show() blocks execution

        Returns:
            The matplotlib Figure object, or None if there is nothing to plot
        """
        fig = self._create_figure()
        if fig is None:
            return None

        if show:
            plt.show(block=block)
        return fig

    def _create_figure(self) -> Optional[plt.Figure]:
        outcomes = self.report.outcomes
        if not outcomes:
            logger.warning("No experiments recorded; skipping convergence charts")
            return None

        fig, axes = plt.subplots(1, 3, figsize=(12.5, 4.0), constrained_layout=True)
        fig.suptitle(
            f'AQPE Convergence - {self.report.convergence_count} of {len(outcomes)} Experiments Converged',
            fontsize=12,
            fontweight='bold'
        )

        chart_configs = [
            (axes[0], self._plot_standard_deviation, "standard deviation"),
            (axes[1], self._plot_mean, "mean"),
            (axes[2], self._plot_error_histogram, "error histogram"),
        ]
        for ax, plot_method, name in chart_configs:
            self._safe_plot(ax, plot_method, name)

        return fig

    def _safe_plot(self, ax: plt.Axes, plot_method, name: str) -> None:
        try:
            plot_method(ax)
        except Exception as e:
            logger.warning(f"Failed to plot {name} chart: {e}")
            ax.text(0.5, 0.5, f'Error: {e}', ha='center', va='center', transform=ax.transAxes)

    # =========================================================================
    # Individual Chart Methods
    # =========================================================================

    def _plot_standard_deviation(self, ax: plt.Axes) -> None:
        """Posterior standard deviation per iteration, log scale."""
        for outcome in self.report.outcomes:
            iterations = [record.iteration for record in outcome.history]
            deviations = [record.standard_deviation for record in outcome.history]
            color = '#2ecc71' if outcome.converged else '#e74c3c'
            ax.plot(iterations, deviations, color=color, alpha=0.5, linewidth=1.0)

        ax.axhline(y=self.precision, color='black', linestyle='--', linewidth=1.5, label='Precision')
        ax.set_yscale('log')
        ax.set_xlabel('Iteration')
        ax.set_ylabel('Standard deviation')
        ax.set_title('Posterior Width')
        ax.legend(loc='upper right', fontsize=7)

    def _plot_mean(self, ax: plt.Axes) -> None:
        """Posterior mean per iteration against the target phase."""
        for outcome in self.report.outcomes:
            iterations = [record.iteration for record in outcome.history]
            means = [record.mean for record in outcome.history]
            color = '#2ecc71' if outcome.converged else '#e74c3c'
            ax.plot(iterations, means, color=color, alpha=0.5, linewidth=1.0)

        ax.axhline(y=self.report.target_phi, color='black', linestyle='--', linewidth=1.5, label='Target phase')
        ax.set_xlabel('Iteration')
        ax.set_ylabel('Mean')
        ax.set_title('Posterior Mean')
        ax.legend(loc='lower right', fontsize=7)

    def _plot_error_histogram(self, ax: plt.Axes) -> None:
        """Absolute errors of converged experiments."""
        errors = np.array([
            outcome.absolute_error(self.report.target_phi)
            for outcome in self.report.outcomes
            if outcome.converged
        ])

        if len(errors) == 0:
            ax.text(0.5, 0.5, 'No converged experiments', ha='center', va='center', transform=ax.transAxes)
            ax.set_title('Phase Estimation Error')
            return

        ax.hist(errors, bins=min(30, max(5, len(errors) // 2)), color='#3498db', alpha=0.8)
        ax.axvline(x=self.report.tolerance, color='#e74c3c', linestyle='--', linewidth=1.5, label='Tolerance')
        ax.set_xlabel('|estimate - target|')
        ax.set_ylabel('Experiments')
        ax.set_title('Phase Estimation Error')
        ax.legend(loc='upper right', fontsize=7)
