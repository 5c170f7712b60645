"""
MEV Simulation Engine

Models sandwich attacks against a constant-product AMM and measures how well
a commit-reveal protocol protects traders from them.
"""

from .version import __version__

# Project constants
PROJECT_NAME = "mev-simulation"
VERSION = __version__

from .amm import PoolState, SwapOutcome, apply_swap, calculate_min_output, quote
from .commitment import SwapIntent, hash_intent, verify_intent
from .config_schema import SimulationConfig
from .exceptions import (
    CommitRevealError,
    ConfigurationError,
    MevSimulationError,
    ValidationError,
)
from .optimizer import FrontrunHeuristic, SandwichOutcome, optimal_frontrun
from .simulation import Orchestrator, SimulationResults, SimulationSummary, run, run_batch

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "PoolState",
    "SwapOutcome",
    "quote",
    "apply_swap",
    "calculate_min_output",
    "SwapIntent",
    "hash_intent",
    "verify_intent",
    "FrontrunHeuristic",
    "SandwichOutcome",
    "optimal_frontrun",
    "SimulationConfig",
    "Orchestrator",
    "SimulationResults",
    "SimulationSummary",
    "run",
    "run_batch",
    "MevSimulationError",
    "ConfigurationError",
    "ValidationError",
    "CommitRevealError",
]
