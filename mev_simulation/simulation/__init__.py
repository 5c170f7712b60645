"""
Scenario orchestration, pool tracking and result aggregation.
"""

from .batch import run_batch
from .orchestrator import Orchestrator, TransactionDraw, run
from .pool_state import PoolSnapshot, SimulatedPool
from .results import SimulationResults, SimulationSummary, SkippedBranch

__all__ = [
    "Orchestrator",
    "PoolSnapshot",
    "SimulatedPool",
    "SimulationResults",
    "SimulationSummary",
    "SkippedBranch",
    "TransactionDraw",
    "run",
    "run_batch",
]
