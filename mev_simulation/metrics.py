"""
Prometheus metrics for simulation runs.

Each SimulationMetrics instance owns its own CollectorRegistry unless one is
passed in, so repeated runs and batch workers never collide on collector
names.
"""

import logging
import threading
from typing import Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from .constants import SandwichStatus, Scenario, SkipReason

logger = logging.getLogger(__name__)

PRICE_IMPACT_BUCKETS_BPS = [1, 5, 10, 25, 50, 100, 250, 500, 1000, 10000]


class SimulationMetrics:
    """
    Prometheus collectors for one simulation run

    Tracks:
    - Settled and skipped branches per scenario
    - Sandwich attempts by status and the MEV they extracted
    - Victim and per-scenario trade losses
    - Price impact distribution per scenario
    - Commit-reveal protocol outcomes
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._lock = threading.RLock()
        self._initialize_metrics()

    def _initialize_metrics(self):
        """Initialize all Prometheus metrics"""

        # === TRADE METRICS ===
        self.transactions_total = Counter(
            "mev_sim_transactions_total",
            "Trades settled per scenario",
            ["scenario"],
            registry=self.registry,
        )

        self.skipped_branches_total = Counter(
            "mev_sim_skipped_branches_total",
            "Branches that produced no trade",
            ["scenario", "reason"],
            registry=self.registry,
        )

        self.trade_loss_total = Counter(
            "mev_sim_trade_loss_total",
            "Shortfall against expected output (base units)",
            ["scenario"],
            registry=self.registry,
        )

        self.price_impact_bps = Histogram(
            "mev_sim_price_impact_bps",
            "Price impact of settled trades in basis points",
            ["scenario"],
            buckets=PRICE_IMPACT_BUCKETS_BPS,
            registry=self.registry,
        )

        # === ATTACK METRICS ===
        self.sandwich_attempts_total = Counter(
            "mev_sim_sandwich_attempts_total",
            "Sandwich attempts by status",
            ["status"],
            registry=self.registry,
        )

        self.successful_sandwiches_total = Counter(
            "mev_sim_successful_sandwiches_total",
            "Sandwich attempts that ended in profit",
            registry=self.registry,
        )

        self.mev_extracted = Gauge(
            "mev_sim_mev_extracted",
            "Cumulative attacker profit (base units, signed)",
            registry=self.registry,
        )

        self.victim_loss_total = Counter(
            "mev_sim_victim_loss_total",
            "Cumulative victim loss caused by sandwiches (base units)",
            registry=self.registry,
        )

        # === PROTOCOL METRICS ===
        self.commit_reveal_total = Counter(
            "mev_sim_commit_reveal_total",
            "Commit-reveal protocol outcomes",
            ["outcome"],
            registry=self.registry,
        )

        # === POOL METRICS ===
        self.pool_reserve = Gauge(
            "mev_sim_pool_reserve",
            "Live pool reserve after each transaction",
            ["token"],
            registry=self.registry,
        )

    # === METRIC RECORDING METHODS ===

    def record_trade(
        self, scenario: Scenario, loss: int, price_impact_bps: int
    ):
        """Record a settled trade"""
        with self._lock:
            self.transactions_total.labels(scenario=scenario.value).inc()
            if loss > 0:
                self.trade_loss_total.labels(scenario=scenario.value).inc(loss)
            self.price_impact_bps.labels(scenario=scenario.value).observe(
                price_impact_bps
            )

    def record_skip(self, scenario: Scenario, reason: SkipReason):
        """Record a branch that produced no trade"""
        with self._lock:
            self.skipped_branches_total.labels(
                scenario=scenario.value, reason=reason.value
            ).inc()

    def record_sandwich(
        self, status: SandwichStatus, profit: int, victim_loss: int
    ):
        """Record one sandwich attempt"""
        with self._lock:
            self.sandwich_attempts_total.labels(status=status.value).inc()
            if profit > 0:
                self.successful_sandwiches_total.inc()
            if profit != 0:
                self.mev_extracted.inc(profit)
            if victim_loss > 0:
                self.victim_loss_total.inc(victim_loss)

    def record_commit_reveal(self, outcome: str):
        """Record a commit-reveal outcome (committed, revealed, commit_rejected, reveal_rejected)"""
        with self._lock:
            self.commit_reveal_total.labels(outcome=outcome).inc()

    def update_pool_reserves(self, reserve_a: int, reserve_b: int):
        """Update live pool reserve gauges"""
        with self._lock:
            self.pool_reserve.labels(token="a").set(reserve_a)
            self.pool_reserve.labels(token="b").set(reserve_b)

    # === READ ACCESS ===

    def get_sample(
        self, name: str, labels: Optional[Dict[str, str]] = None
    ) -> Optional[float]:
        """Read one sample value from the registry (None if never recorded)"""
        return self.registry.get_sample_value(name, labels or {})

    def exposition(self) -> str:
        """Render all metrics in the Prometheus text format"""
        return generate_latest(self.registry).decode("utf-8")


# Global metrics instance
_global_metrics: Optional[SimulationMetrics] = None


def get_metrics() -> SimulationMetrics:
    """Get or create global metrics instance"""
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = SimulationMetrics()
    return _global_metrics


def initialize_metrics(registry: Optional[CollectorRegistry] = None) -> SimulationMetrics:
    """Initialize global metrics with custom registry"""
    global _global_metrics
    _global_metrics = SimulationMetrics(registry)
    return _global_metrics
