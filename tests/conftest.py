"""Pytest fixtures for AQPE via RFPE tests."""

import math

import numpy as np
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import Config, ExperimentConfig, FilterConfig, RunConfig
from estimation.random_source import RandomSource


@pytest.fixture
def seed():
    """Fixed seed for reproducible random sources."""
    return 42


@pytest.fixture
def source(seed):
    """Create a seeded random source."""
    return RandomSource(np.random.SeedSequence(seed))


@pytest.fixture
def experiment_config():
    """Create the default experiment: target pi/2, precision 1e-2, alpha 1."""
    return ExperimentConfig()


@pytest.fixture
def filter_config():
    """Create the default rejection filter configuration."""
    return FilterConfig()


@pytest.fixture
def small_config():
    """Create a fast configuration with a handful of repetitions."""
    return Config(
        experiment=ExperimentConfig(
            target_phi=math.pi / 2,
            precision=1e-2,
            alpha=1.0,
            number_of_prior_samples=500,
        ),
        run=RunConfig(number_of_repetitions=3, seed=7, print_mode='silent'),
    )


@pytest.fixture
def unreachable_config():
    """Create a configuration that cannot converge: no evidence is ever drawn."""
    return Config(
        experiment=ExperimentConfig(
            precision=1e-10,
            number_of_evidence_samples=0,
            number_of_prior_samples=200,
        ),
        run=RunConfig(number_of_repetitions=10, seed=11, print_mode='silent'),
    )


@pytest.fixture
def uniform_prior_samples(source):
    """Create prior samples spread uniformly over (-pi/2, pi/2)."""
    return source.generator.uniform(-math.pi / 2, math.pi / 2, size=2000)
