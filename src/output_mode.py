"""Output mode abstraction for controlling print verbosity.

This module provides a centralized system for controlling console output of
experiment runs. It supports three modes:
- HUMAN: Every iteration of every experiment, each experiment's conclusion,
  and the final summary
- MINIMAL: One compact line per experiment and the final summary
- SILENT: No console output

The estimation behavior is identical across all modes - only output differs.

In HUMAN mode the iteration lines of an experiment are printed together once
that experiment finishes, replayed from its recorded history, rather than
while each iteration runs.
"""

from enum import Enum
from typing import TYPE_CHECKING

from analysis.output_formatter import (
    format_configuration,
    format_experiment_details,
    format_report,
)
from config import Config
from data_types import ExperimentOutcome

if TYPE_CHECKING:
    from estimation.aggregator import AggregateReport


class PrintMode(Enum):
    """Output verbosity modes."""
    HUMAN = "human"        # Verbose, per-iteration output
    MINIMAL = "minimal"    # One line per experiment plus summary
    SILENT = "silent"      # No console output


class OutputController:
    """Centralized controller for all run output.

    Provides mode-aware methods for printing the configuration header, each
    finished experiment, and the final report. All print decisions go through
    this class.
    """

    def __init__(self, mode: PrintMode = PrintMode.MINIMAL):
        self.mode = mode

    @classmethod
    def from_string(cls, mode_str: str) -> 'OutputController':
        """Create OutputController from string mode name.

        Args:
            mode_str: One of 'human', 'minimal', 'silent'

        Returns:
            OutputController configured for the specified mode
        """
        mode_map = {
            'human': PrintMode.HUMAN,
            'minimal': PrintMode.MINIMAL,
            'silent': PrintMode.SILENT,
        }
        mode = mode_map.get(mode_str.lower(), PrintMode.MINIMAL)
        return cls(mode)

    def is_verbose(self) -> bool:
        return self.mode == PrintMode.HUMAN

    def is_silent(self) -> bool:
        return self.mode == PrintMode.SILENT

    def print_configuration(self, config: Config) -> None:
        if self.is_silent():
            return
        if self.is_verbose():
            print("\nIn verbose mode!")
        print(format_configuration(config))

    def print_experiment(self, outcome: ExperimentOutcome) -> None:
        """Print a finished experiment based on current mode.

        Args:
            outcome: Finished experiment with its iteration history
        """
        if self.mode == PrintMode.SILENT:
            return

        if self.mode == PrintMode.MINIMAL:
            status = 'converged' if outcome.converged else 'exhausted'
            print(
                f"Exp {outcome.experiment_number}: {status} it={outcome.iteration_count} "
                f"phi={outcome.estimated_phi:.6e} std={outcome.final_standard_deviation:.6e}"
            )
            return

        # HUMAN mode: full iteration trace
        print()
        print(format_experiment_details(outcome))

    def print_report(self, report: "AggregateReport", config: Config) -> None:
        """Print the summary across all experiments."""
        if self.is_silent():
            return

        print()
        print(format_report(report, config.experiment))

        if self.mode == PrintMode.MINIMAL:
            print(
                "\nTo print details of all experiments, please run in verbose mode "
                "using the '-v' command-line argument option."
            )
