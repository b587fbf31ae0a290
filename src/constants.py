"""Shared constants for the AQPE via RFPE simulator.

This module consolidates parameter bounds, defaults, and numerical limits used
across config.py, the estimation package, and the command-line entry point.
"""

import math

# =============================================================================
# Parameter Bounds
# =============================================================================

MIN_PHI: float = -math.pi
MAX_PHI: float = math.pi

MIN_PRECISION: float = 1e-10
MAX_PRECISION: float = 1.0

MIN_ALPHA: float = 0.0
MAX_ALPHA: float = 1.0

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_TARGET_PHI: float = math.pi / 2
DEFAULT_PRECISION: float = 1e-2
DEFAULT_ALPHA: float = 1.0
DEFAULT_PRIOR_SAMPLES: int = 1000
DEFAULT_REPETITIONS: int = 1

# Initial belief over the phase at the start of every experiment
INITIAL_MEAN: float = 0.0
INITIAL_STANDARD_DEVIATION: float = math.pi / 2

# =============================================================================
# Algorithm Limits
# =============================================================================

# Iterative circuit mappings allowed per experiment before giving up
MAX_ITERATIONS: int = 100

# Auto-derived evidence sample counts are capped here unless the user asked
# for the uncapped value explicitly
MAX_AUTO_EVIDENCE_SAMPLES: int = 1_000_000

# Converged estimates further than this many multiples of the precision from
# the target count as wrong convergences
WRONG_CONVERGENCE_SIGMA: float = 4.0

POSTERIOR_STD_INCREASE_FACTOR: float = 1.0

# Applied to the previous standard deviation when no prior sample is accepted
ZERO_ACCEPTANCE_INFLATION_FACTOR: float = 2.0

# Uniform draws per chunk when simulating circuit shots (bounds memory)
EVIDENCE_CHUNK_SIZE: int = 1_000_000

# =============================================================================
# Output
# =============================================================================

PRINT_MODES = ('human', 'minimal', 'silent')
