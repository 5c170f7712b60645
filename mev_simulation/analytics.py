"""
Derived series for reporting on a finished simulation run.

Values in cumulative series and histograms are expressed in whole tokens
(base units / 1e9) for display; the comparison metrics stay in base units.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

from .constants import Scenario
from .simulation.results import SimulationResults
from .utils import base_units_to_tokens, calculate_percentage

HISTOGRAM_BUCKETS = 10


@dataclass(frozen=True)
class CumulativePoint:
    transaction: int
    value: float


@dataclass(frozen=True)
class HistogramBucket:
    range_start: float
    range_end: float
    count: int
    label: str


@dataclass(frozen=True)
class PricePoint:
    transaction: int
    price: float


@dataclass(frozen=True)
class ComparisonMetrics:
    """Unprotected versus protected losses."""

    normal_total_loss: int
    protected_total_loss: int
    savings: int
    savings_percentage: float
    attacked_transactions: int
    protected_transactions: int


def _cumulative(values: Sequence[int]) -> List[CumulativePoint]:
    points = []
    running = 0
    for i, value in enumerate(values):
        running += value
        points.append(CumulativePoint(transaction=i, value=base_units_to_tokens(running)))
    return points


def histogram(values: Sequence[float], buckets: int = HISTOGRAM_BUCKETS) -> List[HistogramBucket]:
    """
    Equal-width histogram between the minimum and maximum value.

    Returns an empty list for no values and a single bucket when every value
    is identical.
    """
    if not values:
        return []

    low, high = min(values), max(values)
    width = (high - low) / buckets
    if width == 0:
        return [HistogramBucket(low, high, len(values), f"{low:.6f}")]

    counts = [0] * buckets
    for value in values:
        index = min(int(math.floor((value - low) / width)), buckets - 1)
        counts[index] += 1

    result = []
    for i, count in enumerate(counts):
        start = low + i * width
        end = start + width
        result.append(HistogramBucket(start, end, count, f"{start:.6f}-{end:.6f}"))
    return result


def cumulative_mev(results: SimulationResults) -> List[CumulativePoint]:
    """Running attacker profit over sandwich attempts."""
    return _cumulative([s.profit for s in results.sandwiches])


def cumulative_losses(results: SimulationResults) -> List[CumulativePoint]:
    """Running victim loss over sandwich attempts."""
    return _cumulative([s.victim_loss for s in results.sandwiches])


def loss_distribution(results: SimulationResults) -> List[HistogramBucket]:
    """Histogram of non-zero victim losses."""
    return histogram(
        [base_units_to_tokens(s.victim_loss) for s in results.sandwiches if s.victim_loss > 0]
    )


def profit_distribution(results: SimulationResults) -> List[HistogramBucket]:
    """Histogram of attacker profit over all attempts."""
    return histogram([base_units_to_tokens(s.profit) for s in results.sandwiches])


def price_over_time(results: SimulationResults) -> List[PricePoint]:
    """Spot price of A in B along the unprotected timeline."""
    return [
        PricePoint(transaction=snap.transaction_id, price=snap.price_a_in_b)
        for snap in results.pool_snapshots
        if snap.scenario == Scenario.UNPROTECTED
    ]


def comparison_metrics(results: SimulationResults) -> ComparisonMetrics:
    normal_loss = sum(t.loss for t in results.unprotected_trades)
    protected_loss = sum(t.loss for t in results.protected_trades)
    savings = max(0, normal_loss - protected_loss)
    return ComparisonMetrics(
        normal_total_loss=normal_loss,
        protected_total_loss=protected_loss,
        savings=savings,
        savings_percentage=calculate_percentage(savings, normal_loss),
        attacked_transactions=sum(1 for t in results.unprotected_trades if t.was_attacked),
        protected_transactions=len(results.protected_trades),
    )
