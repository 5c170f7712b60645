"""
Batch runner for independent simulations.

Each seed gets its own process, pool and actor set; nothing is shared
between runs.
"""

import logging
import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from ..config_schema import SimulationConfig
from ..utils import get_logger
from .orchestrator import run
from .results import SimulationResults

logger = logging.getLogger(__name__)


def _run_seeded(config: SimulationConfig, seed: int) -> SimulationResults:
    run_log = get_logger(
        f"{__name__}.runs",
        level=logger.getEffectiveLevel(),
        extra={"seed": seed},
        minimal=True,
    )
    results = run(config.model_copy(update={"seed": seed}))
    summary = results.summary
    run_log.info(
        f"{summary.total_transactions} trades, "
        f"mev={summary.total_mev_extracted} victim_losses={summary.total_victim_losses}"
    )
    return results


def run_batch(
    config: SimulationConfig,
    seeds: Sequence[int],
    max_workers: Optional[int] = None,
) -> List[SimulationResults]:
    """
    Run one simulation per seed in a process pool.

    Args:
        config: Base configuration; its ``seed`` is replaced per run
        seeds: Seeds to run, one simulation each
        max_workers: Worker processes (defaults to the CPU count, capped at
            the number of seeds); 1 runs everything in-process

    Returns:
        Results in the same order as ``seeds``
    """
    seeds = list(seeds)
    if not seeds:
        return []

    if max_workers is None or max_workers < 1:
        max_workers = max(1, mp.cpu_count())
    max_workers = min(max_workers, len(seeds))

    logger.info(f"Running batch of {len(seeds)} simulations on {max_workers} worker(s)")

    if max_workers == 1:
        return [_run_seeded(config, seed) for seed in seeds]

    by_position: Dict[int, SimulationResults] = {}
    with ProcessPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(_run_seeded, config, seed): position
            for position, seed in enumerate(seeds)
        }
        for fut in as_completed(futures):
            position = futures[fut]
            by_position[position] = fut.result()
            logger.debug(f"Batch run for seed {seeds[position]} finished")

    return [by_position[i] for i in range(len(seeds))]
