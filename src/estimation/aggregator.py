"""Repeated experiments and their convergence statistics.

Experiments run one after another on a single shared random stream, so a
fixed seed replays the whole batch. With more than one worker each experiment
instead gets its own child source spawned from the run's seed sequence and
runs in a worker process; the reduction over outcomes is the same sum/count
in experiment order.

The report holds running totals. Individual outcomes are kept only when asked
for (the convergence charts need them).
"""

import logging
from collections import deque
from concurrent.futures import Future, ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterator, List, Optional, TYPE_CHECKING

from config import Config, ExperimentConfig, FilterConfig
from data_types import ConvergenceClass, ExperimentOutcome
from estimation.random_source import RandomSource
from estimation.runner import run_experiment

if TYPE_CHECKING:
    from output_mode import OutputController

logger = logging.getLogger(__name__)


@dataclass
class AggregateReport:
    """Running totals across repeated experiments.

    Averages cover converged experiments only and are None when none converged.
    `outcomes` is filled only when `keep_outcomes` is set.
    """

    number_of_repetitions: int
    target_phi: float
    tolerance: float
    convergence_count: int = 0
    wrong_convergence_count: int = 0
    total_iterations: float = 0.0
    total_absolute_error: float = 0.0
    experiment_count: int = 0
    keep_outcomes: bool = True
    outcomes: List[ExperimentOutcome] = field(default_factory=list)

    @classmethod
    def for_config(cls, config: Config, keep_outcomes: bool = False) -> 'AggregateReport':
        return cls(
            number_of_repetitions=config.run.number_of_repetitions,
            target_phi=config.experiment.target_phi,
            tolerance=config.experiment.tolerance,
            keep_outcomes=keep_outcomes,
        )

    def classify(self, outcome: ExperimentOutcome) -> ConvergenceClass:
        if not outcome.converged:
            return ConvergenceClass.NOT_CONVERGED
        if outcome.absolute_error(self.target_phi) > self.tolerance:
            return ConvergenceClass.WRONG_CONVERGENCE
        return ConvergenceClass.CONVERGED

    def record(self, outcome: ExperimentOutcome) -> ConvergenceClass:
        """Add one experiment outcome to the totals.

        Args:
            outcome: Finished experiment

        Returns:
            The outcome's classification
        """
        classification = self.classify(outcome)
        self.experiment_count += 1
        if self.keep_outcomes:
            self.outcomes.append(outcome)

        if classification is not ConvergenceClass.NOT_CONVERGED:
            self.convergence_count += 1
            self.total_iterations += outcome.iteration_count
            self.total_absolute_error += outcome.absolute_error(self.target_phi)
        if classification is ConvergenceClass.WRONG_CONVERGENCE:
            self.wrong_convergence_count += 1

        return classification

    @property
    def has_converged(self) -> bool:
        return self.convergence_count > 0

    @property
    def average_iterations(self) -> Optional[float]:
        if self.convergence_count == 0:
            return None
        return self.total_iterations / self.convergence_count

    @property
    def average_absolute_error(self) -> Optional[float]:
        if self.convergence_count == 0:
            return None
        return self.total_absolute_error / self.convergence_count

    @property
    def convergence_rate(self) -> float:
        """Fraction of recorded experiments that converged."""
        if self.experiment_count == 0:
            return 0.0
        return self.convergence_count / self.experiment_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number_of_repetitions': self.number_of_repetitions,
            'experiment_count': self.experiment_count,
            'convergence_count': self.convergence_count,
            'wrong_convergence_count': self.wrong_convergence_count,
            'average_iterations': self.average_iterations,
            'average_absolute_error': self.average_absolute_error,
            'tolerance': self.tolerance,
        }


def _run_experiment_worker(payload: Dict[str, Any]) -> ExperimentOutcome:
    """Process-pool entry point; the payload is pickled to the worker."""
    return run_experiment(
        payload['experiment'],
        payload['filter'],
        payload['source'],
        experiment_number=payload['experiment_number'],
        record_history=payload['record_history'],
    )


class ExperimentAggregator:
    """Runs the configured number of experiments and accumulates a report.

    Per-iteration histories are recorded only when something consumes them:
    a verbose OutputController prints them as each experiment finishes, and
    retained outcomes feed the convergence charts. Otherwise only the running
    totals survive an experiment, so memory stays flat in the number of
    repetitions.

    Args:
        config: Master configuration
        output: Optional OutputController notified after each experiment
        keep_outcomes: Retain every outcome in the report (None = only when
            config.run.show_charts is set)
    """

    def __init__(
        self,
        config: Config,
        output: Optional['OutputController'] = None,
        keep_outcomes: Optional[bool] = None
    ) -> None:
        self.config = config
        self.output = output
        self.keep_outcomes = config.run.show_charts if keep_outcomes is None else keep_outcomes
        self.record_history = self.keep_outcomes or (output is not None and output.is_verbose())

    def run(self, source: Optional[RandomSource] = None) -> AggregateReport:
        """Run all repetitions.

        Args:
            source: Random source owned by this run (None = seeded from
                config.run.seed)

        Returns:
            AggregateReport over every experiment
        """
        if source is None:
            source = RandomSource.from_seed(self.config.run.seed)

        report = AggregateReport.for_config(self.config, keep_outcomes=self.keep_outcomes)
        if self.config.run.workers > 1:
            outcomes = self._run_parallel(source)
        else:
            outcomes = self._run_sequential(source)

        for outcome in outcomes:
            report.record(outcome)
            if self.output is not None:
                self.output.print_experiment(outcome)

        return report

    def _run_sequential(self, source: RandomSource) -> Iterator[ExperimentOutcome]:
        experiment: ExperimentConfig = self.config.experiment
        filter_config: FilterConfig = self.config.filter
        for number in range(1, self.config.run.number_of_repetitions + 1):
            yield run_experiment(
                experiment,
                filter_config,
                source,
                experiment_number=number,
                record_history=self.record_history,
            )

    def _run_parallel(self, source: RandomSource) -> Iterator[ExperimentOutcome]:
        repetitions = self.config.run.number_of_repetitions
        workers = min(self.config.run.workers, repetitions)
        logger.info(f"Running {repetitions} experiments on {workers} worker processes")

        # At most 2 * workers experiments are in flight; results are yielded
        # in experiment order as soon as the oldest one finishes
        max_pending = 2 * workers
        pending: Deque[Future] = deque()
        with ProcessPoolExecutor(max_workers=workers) as executor:
            for number in range(1, repetitions + 1):
                # Spawning one child at a time gives the same streams as spawn(repetitions)
                child = source.spawn(1)[0]
                pending.append(executor.submit(_run_experiment_worker, {
                    'experiment': self.config.experiment,
                    'filter': self.config.filter,
                    'source': child,
                    'experiment_number': number,
                    'record_history': self.record_history,
                }))
                if len(pending) >= max_pending:
                    yield pending.popleft().result()

            while pending:
                yield pending.popleft().result()
