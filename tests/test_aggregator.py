"""Tests for repeated experiments and the aggregate report."""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import Config, ExperimentConfig, RunConfig
from data_types import ConvergenceClass, ExperimentOutcome
from estimation.aggregator import AggregateReport, ExperimentAggregator
from estimation.random_source import RandomSource
from estimation.runner import run_experiment


def make_outcome(number: int, converged: bool, iterations: int, estimate: float) -> ExperimentOutcome:
    return ExperimentOutcome(
        experiment_number=number,
        converged=converged,
        iteration_count=iterations,
        estimated_phi=estimate,
        final_standard_deviation=1e-3 if converged else 0.5,
    )


@pytest.fixture
def report():
    """Create an empty report for target 1.0 with tolerance 0.04."""
    return AggregateReport(number_of_repetitions=4, target_phi=1.0, tolerance=0.04)


class TestAggregateReport:
    """Tests for AggregateReport classification and averages."""

    def test_not_converged_counts_only_in_denominator(self, report):
        """Non-converged experiments leave the convergence totals alone."""
        assert report.record(make_outcome(1, False, 100, 0.0)) is ConvergenceClass.NOT_CONVERGED
        assert report.convergence_count == 0
        assert report.wrong_convergence_count == 0
        assert len(report.outcomes) == 1

    def test_converged_within_tolerance(self, report):
        """A close estimate is a normal success."""
        assert report.record(make_outcome(1, True, 8, 1.01)) is ConvergenceClass.CONVERGED
        assert report.convergence_count == 1
        assert report.wrong_convergence_count == 0

    def test_wrong_convergence_still_counts_as_converged(self, report):
        """A far estimate is a wrong convergence and still a convergence."""
        assert report.record(make_outcome(1, True, 8, 1.5)) is ConvergenceClass.WRONG_CONVERGENCE
        assert report.convergence_count == 1
        assert report.wrong_convergence_count == 1

    def test_averages_cover_converged_only(self, report):
        """Averages divide by the convergence count."""
        report.record(make_outcome(1, True, 6, 1.02))
        report.record(make_outcome(2, True, 10, 0.9))
        report.record(make_outcome(3, False, 100, 3.0))
        assert report.average_iterations == pytest.approx(8.0)
        assert report.average_absolute_error == pytest.approx((0.02 + 0.1) / 2)
        assert report.convergence_rate == pytest.approx(2 / 3)

    def test_no_convergence_gives_none_not_nan(self, report):
        """An all-failed batch reports None averages."""
        report.record(make_outcome(1, False, 100, 0.0))
        assert not report.has_converged
        assert report.average_iterations is None
        assert report.average_absolute_error is None

    def test_empty_report(self, report):
        """A report with no outcomes has a zero convergence rate."""
        assert report.convergence_rate == 0.0

    def test_totals_only_report_keeps_no_outcomes(self):
        """Without keep_outcomes only the running totals change."""
        report = AggregateReport(number_of_repetitions=3, target_phi=1.0, tolerance=0.04, keep_outcomes=False)
        report.record(make_outcome(1, True, 6, 1.0))
        report.record(make_outcome(2, False, 100, 0.0))
        assert report.outcomes == []
        assert report.experiment_count == 2
        assert report.convergence_rate == pytest.approx(0.5)

    def test_to_dict(self, report):
        """to_dict exposes the summary fields."""
        report.record(make_outcome(1, True, 5, 1.0))
        summary = report.to_dict()
        assert summary['convergence_count'] == 1
        assert summary['average_iterations'] == 5.0
        assert summary['tolerance'] == 0.04

    def test_for_config(self):
        """for_config takes the target and tolerance from the experiment config."""
        config = Config(experiment=ExperimentConfig(target_phi=0.5, precision=1e-3))
        report = AggregateReport.for_config(config)
        assert report.target_phi == 0.5
        assert report.tolerance == pytest.approx(4e-3)
        assert not report.keep_outcomes


class TestExperimentAggregator:
    """Tests for ExperimentAggregator."""

    def test_reference_scenario_mostly_converges(self):
        """pi/2 target at precision 1e-2 converges close to the target in most runs."""
        config = Config(run=RunConfig(number_of_repetitions=10, seed=1234, print_mode='silent'))
        report = ExperimentAggregator(config).run()
        assert report.experiment_count == 10
        assert report.outcomes == []
        assert report.convergence_count >= 8
        assert report.convergence_count - report.wrong_convergence_count >= 6

    def test_unreachable_precision_reports_no_convergence(self, unreachable_config):
        """Ten unreachable experiments give zero convergences and no NaN averages."""
        report = ExperimentAggregator(unreachable_config, keep_outcomes=True).run()
        assert report.convergence_count == 0
        assert report.wrong_convergence_count == 0
        assert not report.has_converged
        assert report.average_iterations is None
        assert report.average_absolute_error is None
        assert all(outcome.iteration_count == 100 for outcome in report.outcomes)

    def test_fixed_seed_is_reproducible(self, small_config):
        """A fixed run seed replays the whole batch."""
        first = ExperimentAggregator(small_config, keep_outcomes=True).run()
        second = ExperimentAggregator(small_config, keep_outcomes=True).run()
        assert [o.estimated_phi for o in first.outcomes] == [o.estimated_phi for o in second.outcomes]

    def test_experiments_share_one_stream(self, small_config):
        """Sequential experiments draw from the same source one after another."""
        report = ExperimentAggregator(small_config, keep_outcomes=True).run(RandomSource.from_seed(99))

        source = RandomSource.from_seed(99)
        expected = [
            run_experiment(small_config.experiment, small_config.filter, source, experiment_number=n)
            for n in range(1, 4)
        ]
        assert [o.estimated_phi for o in report.outcomes] == [o.estimated_phi for o in expected]
        assert [o.experiment_number for o in report.outcomes] == [1, 2, 3]

    def test_output_notified_per_experiment(self, small_config):
        """The output controller sees every finished experiment."""
        seen = []

        class RecordingOutput:
            def is_verbose(self):
                return False

            def print_experiment(self, outcome):
                seen.append(outcome.experiment_number)

        ExperimentAggregator(small_config, RecordingOutput()).run()
        assert seen == [1, 2, 3]

    def test_parallel_matches_spawned_streams(self, small_config):
        """Worker processes give the same outcomes as the spawned child streams."""
        config = Config(
            experiment=small_config.experiment,
            run=RunConfig(number_of_repetitions=3, seed=7, workers=2, print_mode='silent'),
        )
        report = ExperimentAggregator(config, keep_outcomes=True).run(RandomSource.from_seed(7))

        children = RandomSource.from_seed(7).spawn(3)
        expected = [
            run_experiment(config.experiment, config.filter, child, experiment_number=n)
            for n, child in enumerate(children, start=1)
        ]
        assert [o.estimated_phi for o in report.outcomes] == [o.estimated_phi for o in expected]
        assert [o.experiment_number for o in report.outcomes] == [1, 2, 3]

    def test_silent_run_without_charts_retains_no_iterations(self, small_config):
        """Without charts or verbose output no per-iteration records survive."""
        delivered = []

        class RecordingOutput:
            def is_verbose(self):
                return False

            def print_experiment(self, outcome):
                delivered.append(outcome)

        report = ExperimentAggregator(small_config, RecordingOutput()).run()
        assert report.outcomes == []
        assert report.experiment_count == 3
        assert all(outcome.history == [] for outcome in delivered)

    def test_verbose_output_receives_histories(self, small_config):
        """A verbose output still gets the iteration history of each experiment."""
        delivered = []

        class VerboseOutput:
            def is_verbose(self):
                return True

            def print_experiment(self, outcome):
                delivered.append(outcome)

        report = ExperimentAggregator(small_config, VerboseOutput()).run()
        assert report.outcomes == []
        assert all(len(outcome.history) == outcome.iteration_count + 1 for outcome in delivered)

    def test_charts_keep_outcomes(self, small_config):
        """show_charts retains every outcome with its history for plotting."""
        config = Config(
            experiment=small_config.experiment,
            run=RunConfig(number_of_repetitions=3, seed=7, print_mode='silent', show_charts=True),
        )
        report = ExperimentAggregator(config).run()
        assert len(report.outcomes) == 3
        assert all(len(outcome.history) == outcome.iteration_count + 1 for outcome in report.outcomes)
