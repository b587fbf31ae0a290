"""Reporting and visualization components for experiment results."""

from analysis.output_formatter import (
    format_configuration,
    format_iteration,
    format_experiment,
    format_experiment_details,
    format_report,
)
from analysis.charts import ConvergenceChart

__all__ = [
    'format_configuration',
    'format_iteration',
    'format_experiment',
    'format_experiment_details',
    'format_report',
    'ConvergenceChart',
]
