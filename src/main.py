"""Main entry point for AQPE via RFPE experiments.

This module turns command-line options into a Config and orchestrates the run
using components from:
- config.py: Configuration dataclasses
- estimation/: Random source, samplers, rejection filter, experiment loop
- analysis/: Console formatting and convergence charts
"""

import argparse
import logging
import sys
from typing import List, Optional

from config import (
    Config,
    ExperimentConfig,
    FilterConfig,
    RunConfig,
    auto_evidence_sample_count,
)
from constants import (
    DEFAULT_ALPHA,
    DEFAULT_PRECISION,
    DEFAULT_PRIOR_SAMPLES,
    DEFAULT_REPETITIONS,
    DEFAULT_TARGET_PHI,
    MAX_ALPHA,
    MAX_PHI,
    MAX_PRECISION,
    MIN_ALPHA,
    MIN_PHI,
    MIN_PRECISION,
)
from estimation.aggregator import ExperimentAggregator
from estimation.random_source import RandomSource
from estimation.sampling import SamplingBudgetExceededError
from output_mode import OutputController

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='aqpe',
        description=(
            "Accelerated Quantum Phase Estimation (AQPE) using "
            "Rejection Filtering Phase Estimation (RFPE)"
        ),
    )
    parser.add_argument('-t', dest='target_phi', type=float, default=DEFAULT_TARGET_PHI,
                        help="Target phase in [-pi, pi] (default: pi / 2)")
    parser.add_argument('-p', dest='precision', type=float, default=DEFAULT_PRECISION,
                        help=f"Precision of the phase estimate in [{MIN_PRECISION:e}, {MAX_PRECISION:e}] "
                             f"(default: {DEFAULT_PRECISION:g})")
    parser.add_argument('-a', dest='alpha', type=float, default=DEFAULT_ALPHA,
                        help=f"Contrast exponent alpha in [0, 1] (default: {DEFAULT_ALPHA:g})")
    parser.add_argument('-n', dest='evidence_samples', type=int, default=None,
                        help="Evidence samples per iteration; 0 derives the required count without "
                             "the 1000000 cap (default: derived and capped)")
    parser.add_argument('-m', dest='prior_samples', type=int, default=DEFAULT_PRIOR_SAMPLES,
                        help=f"Prior test samples per iteration (default: {DEFAULT_PRIOR_SAMPLES})")
    parser.add_argument('-r', dest='repetitions', type=int, default=DEFAULT_REPETITIONS,
                        help=f"Number of repetitions of the AQPE experiment (default: {DEFAULT_REPETITIONS})")
    parser.add_argument('-v', dest='verbose', action='store_true',
                        help="Verbose mode: print details of each repeated AQPE experiment")
    parser.add_argument('--quiet', action='store_true', help="Suppress all console output except logging")
    parser.add_argument('--seed', type=int, default=None, help="Random seed (default: time of day)")
    parser.add_argument('--workers', type=int, default=1,
                        help="Worker processes; above 1 each experiment gets an independent stream")
    parser.add_argument('--max-sampling-attempts', type=int, default=None,
                        help="Attempt budget of the restricted Gaussian sampler (default: unbounded)")
    parser.add_argument('--charts', action='store_true', help="Show convergence charts at the end")
    return parser


def _in_range_or_default(name: str, value: float, low: float, high: float, default: float) -> float:
    if low <= value <= high:
        return value
    logger.warning(f"{name} should be in [{low:e}, {high:e}]. Continuing with the default value {default:e}.")
    return default


def build_config(args: argparse.Namespace) -> Config:
    """Build a validated Config from parsed command-line arguments.

    Out-of-range phase, precision and alpha fall back to their defaults with
    a warning; invalid counts raise ValueError.
    """
    target_phi = _in_range_or_default('target phase', args.target_phi, MIN_PHI, MAX_PHI, DEFAULT_TARGET_PHI)
    precision = _in_range_or_default('precision', args.precision, MIN_PRECISION, MAX_PRECISION, DEFAULT_PRECISION)
    alpha = _in_range_or_default('alpha', args.alpha, MIN_ALPHA, MAX_ALPHA, DEFAULT_ALPHA)

    evidence_samples = args.evidence_samples
    if evidence_samples is not None:
        if evidence_samples < 0:
            raise ValueError(
                "Number of evidence samples per iteration should be a non-negative integer. "
                "Use '-n 0' to trigger automatic selection."
            )
        if evidence_samples == 0:
            evidence_samples = auto_evidence_sample_count(precision, alpha)

    if args.verbose:
        print_mode = 'human'
    elif args.quiet:
        print_mode = 'silent'
    else:
        print_mode = 'minimal'

    return Config(
        experiment=ExperimentConfig(
            target_phi=target_phi,
            precision=precision,
            alpha=alpha,
            number_of_evidence_samples=evidence_samples,
            number_of_prior_samples=args.prior_samples,
        ),
        filter=FilterConfig(max_sampling_attempts=args.max_sampling_attempts),
        run=RunConfig(
            number_of_repetitions=args.repetitions,
            seed=args.seed,
            workers=args.workers,
            print_mode=print_mode,
            show_charts=args.charts,
        ),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the configured experiments and print the aggregate report.

    Returns:
        Process exit status (0 on success, 1 on invalid arguments or failure)
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    args = build_parser().parse_args(argv)
    try:
        config = build_config(args)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return 1

    output = OutputController.from_string(config.run.print_mode)
    output.print_configuration(config)

    source = RandomSource.from_seed(config.run.seed)
    aggregator = ExperimentAggregator(config, output)
    try:
        report = aggregator.run(source)
    except SamplingBudgetExceededError as e:
        logger.error(f"Restricted Gaussian sampling failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Run interrupted by user (Ctrl+C)")
        return 1

    logger.debug(f"Aggregate report: {report.to_dict()}")
    output.print_report(report, config)

    if config.run.show_charts:
        from analysis.charts import ConvergenceChart
        ConvergenceChart(report, config.experiment.precision).generate_all(show=True)

    return 0


if __name__ == '__main__':
    sys.exit(main())
