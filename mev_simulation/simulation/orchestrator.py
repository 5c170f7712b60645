"""
Scenario orchestrator.

Every synthetic transaction is replayed twice from the same pool state: once
in the clear, where the attacker may sandwich it, and once through
commit-reveal. The unprotected branch's pool carries forward to the next
transaction; the protected branch's pool is discarded after its snapshot.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..actors.normal_trader import NormalTrader
from ..actors.protected_trader import ProtectedTrader
from ..actors.sandwich_attacker import SandwichAttacker
from ..actors.types import TradeRecord
from ..amm.pricing import calculate_min_output
from ..amm.types import PoolState
from ..config_schema import SimulationConfig
from ..constants import PROGRESS_LOG_INTERVAL, Scenario, SkipReason
from ..interfaces import (
    DeterministicRandomProvider,
    NonceSource,
    RandomProvider,
    SlotClock,
    get_random_provider,
)
from ..metrics import SimulationMetrics
from ..optimizer import FrontrunHeuristic
from ..utils import base_units_to_tokens
from .pool_state import SimulatedPool
from .results import SimulationResults, SimulationSummary, SkippedBranch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionDraw:
    """Random parameters of one synthetic transaction."""

    amount: int
    a_to_b: bool
    trader_index: int
    attack: bool


class Orchestrator:
    """Runs both scenarios over a sequence of synthetic transactions."""

    def __init__(
        self,
        config: SimulationConfig,
        random_provider: Optional[RandomProvider] = None,
        nonce_source: Optional[NonceSource] = None,
        metrics: Optional[SimulationMetrics] = None,
    ):
        self.config = config
        if random_provider is None:
            if config.seed is not None:
                random_provider = DeterministicRandomProvider(config.seed)
            else:
                random_provider = get_random_provider()
        self.rng = random_provider
        self.metrics = metrics or SimulationMetrics()
        self.clock = SlotClock()

        self.pool = SimulatedPool(
            PoolState(config.initial_pool_a, config.initial_pool_b, config.fee_bps),
            clock=self.clock,
        )
        self.attacker = SandwichAttacker(
            "attacker",
            config.attacker_capital,
            config.attacker_capital,
            heuristic=FrontrunHeuristic(
                victim_divisor=config.frontrun_victim_divisor,
                reserve_divisor=config.frontrun_reserve_divisor,
            ),
            clock=self.clock,
        )
        self.traders: List[NormalTrader] = [
            NormalTrader(
                f"trader_{i}",
                config.trader_balance_a,
                config.trader_balance_b,
                clock=self.clock,
            )
            for i in range(config.num_traders)
        ]
        self.protected_traders: List[ProtectedTrader] = [
            ProtectedTrader(
                f"protected_{i}",
                config.trader_balance_a,
                config.trader_balance_b,
                clock=self.clock,
                nonce_source=nonce_source,
                min_delay_slots=config.reveal_delay_slots,
            )
            for i in range(config.num_traders)
        ]

    def draw_transaction(self) -> TransactionDraw:
        """Draw amount, direction, trader and attack decision, in that order."""
        config = self.config
        amount = self.rng.randint(config.min_swap_amount, config.max_swap_amount)
        a_to_b = self.rng.random() < 0.5
        trader_index = self.rng.randint(0, config.num_traders - 1)
        attack = self.rng.random() < config.attack_probability
        return TransactionDraw(amount, a_to_b, trader_index, attack)

    def run(self) -> SimulationResults:
        """Run all configured transactions and aggregate the results."""
        config = self.config
        results = SimulationResults(config=config, seed=config.seed)

        logger.info(
            f"Starting MEV simulation: {config.total_transactions} transactions, "
            f"attack probability {config.attack_probability:.2f}"
        )

        for i in range(config.total_transactions):
            self.step(i, self.draw_transaction(), results)
            if i == 0 or (i + 1) % PROGRESS_LOG_INTERVAL == 0:
                logger.info(f"Progress: {i + 1}/{config.total_transactions} transactions")

        results.pool_snapshots = list(self.pool.history)
        results.summary = SimulationSummary.from_records(
            results.unprotected_trades,
            results.protected_trades,
            results.sandwiches,
            results.skipped,
        )

        summary = results.summary
        logger.info(
            f"Simulation complete: {summary.successful_attacks}/{summary.attack_attempts} "
            f"attacks succeeded ({summary.attack_success_rate:.1f}%)"
        )
        logger.info(
            f"Total MEV extracted: {summary.total_mev_extracted} lamports "
            f"({base_units_to_tokens(summary.total_mev_extracted):.4f} SOL)"
        )
        logger.info(
            f"Total victim losses: {summary.total_victim_losses} lamports "
            f"({base_units_to_tokens(summary.total_victim_losses):.4f} SOL)"
        )
        return results

    def step(self, index: int, draw: TransactionDraw, results: SimulationResults) -> None:
        """Replay one transaction through both scenarios."""
        if index > 0:
            self.clock.advance()

        pool_before = self.pool.clone_state()

        record = self._run_unprotected(index, draw, results)
        if record is not None:
            results.unprotected_trades.append(record)
        self.pool.snapshot(index, Scenario.UNPROTECTED)
        carry_forward = self.pool.clone_state()

        self.pool.set_state(pool_before)
        record = self._run_protected(index, draw, results)
        if record is not None:
            results.protected_trades.append(record)
        self.pool.snapshot(index, Scenario.PROTECTED)

        self.pool.set_state(carry_forward)
        self.metrics.update_pool_reserves(carry_forward.reserve_a, carry_forward.reserve_b)

    def _skip(
        self,
        index: int,
        scenario: Scenario,
        reason: SkipReason,
        results: SimulationResults,
    ) -> None:
        logger.debug(f"Transaction {index} {scenario.value} branch skipped: {reason.value}")
        results.skipped.append(SkippedBranch(index, scenario, reason))
        self.metrics.record_skip(scenario, reason)

    def _run_unprotected(
        self, index: int, draw: TransactionDraw, results: SimulationResults
    ) -> Optional[TradeRecord]:
        trader = self.traders[draw.trader_index]
        if not trader.can_trade(draw.amount, draw.a_to_b):
            self._skip(index, Scenario.UNPROTECTED, SkipReason.INSUFFICIENT_BALANCE, results)
            return None

        pool = self.pool.state
        expected = trader.quote_expected(pool, draw.amount, draw.a_to_b)

        sandwich = None
        if draw.attack:
            sandwich = self.attacker.execute_sandwich(
                trader.pending(draw.amount, draw.a_to_b), pool
            )
            results.sandwiches.append(sandwich)
            self.metrics.record_sandwich(
                sandwich.status, sandwich.profit, sandwich.victim_loss
            )

        record = trader.trade(
            pool,
            draw.amount,
            draw.a_to_b,
            trade_id=index,
            expected=expected,
            sandwich=sandwich,
        )
        if record is None:
            self._skip(index, Scenario.UNPROTECTED, SkipReason.INVALID_AMOUNT, results)
            return None

        self.metrics.record_trade(Scenario.UNPROTECTED, record.loss, record.price_impact_bps)
        return record

    def _run_protected(
        self, index: int, draw: TransactionDraw, results: SimulationResults
    ) -> Optional[TradeRecord]:
        trader = self.protected_traders[draw.trader_index]
        if not trader.can_trade(draw.amount, draw.a_to_b):
            self._skip(index, Scenario.PROTECTED, SkipReason.INSUFFICIENT_BALANCE, results)
            return None

        pool = self.pool.state
        slippage_bps = self.config.protected_slippage_bps
        min_out = calculate_min_output(pool, draw.amount, draw.a_to_b, slippage_bps)

        if trader.commit(draw.amount, min_out, slippage_bps, draw.a_to_b) is None:
            self.metrics.record_commit_reveal("commit_rejected")
            self._skip(index, Scenario.PROTECTED, SkipReason.COMMIT_REJECTED, results)
            return None
        self.metrics.record_commit_reveal("committed")

        self.clock.advance(self.config.reveal_delay_slots)

        record = trader.reveal(pool, trade_id=index)
        if record is None:
            trader.cancel()
            self.metrics.record_commit_reveal("reveal_rejected")
            self._skip(index, Scenario.PROTECTED, SkipReason.REVEAL_REJECTED, results)
            return None
        self.metrics.record_commit_reveal("revealed")

        self.metrics.record_trade(Scenario.PROTECTED, record.loss, record.price_impact_bps)
        return record

    def reset(self) -> None:
        """Restore pool, actors and clock to their initial state."""
        config = self.config
        self.clock.set_slot(0)
        self.pool.reset()
        self.attacker.reset(config.attacker_capital, config.attacker_capital)
        for trader in self.traders:
            trader.reset(config.trader_balance_a, config.trader_balance_b)
        for trader in self.protected_traders:
            trader.reset(config.trader_balance_a, config.trader_balance_b)
        if config.seed is not None:
            self.rng.seed(config.seed)


def run(
    config: SimulationConfig,
    random_provider: Optional[RandomProvider] = None,
    metrics: Optional[SimulationMetrics] = None,
) -> SimulationResults:
    """Run one full simulation for ``config``."""
    return Orchestrator(config, random_provider=random_provider, metrics=metrics).run()
