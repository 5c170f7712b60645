"""
Sandwich attacker: watches pending swaps and front-runs the profitable ones.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..amm.types import PoolState
from ..constants import direction_label
from ..interfaces import SlotClock
from ..optimizer import (
    FrontrunHeuristic,
    SandwichOutcome,
    optimal_frontrun,
    run_sandwich_legs,
)
from .types import PendingSwap

logger = logging.getLogger(__name__)


@dataclass
class AttackerStats:
    """Running totals for an attacker."""

    total_profit: int = 0
    successful_attacks: int = 0
    failed_attacks: int = 0
    skipped_attacks: int = 0

    @property
    def attempts(self) -> int:
        return self.successful_attacks + self.failed_attacks + self.skipped_attacks


class SandwichAttacker:
    """Attacker holding capital in both tokens."""

    def __init__(
        self,
        name: str,
        capital_a: int,
        capital_b: int,
        heuristic: Optional[FrontrunHeuristic] = None,
        clock: Optional[SlotClock] = None,
    ):
        self.name = name
        self.balance_a = capital_a
        self.balance_b = capital_b
        self.heuristic = heuristic or FrontrunHeuristic()
        self.clock = clock or SlotClock()
        self.stats = AttackerStats()

    def input_balance(self, a_to_b: bool) -> int:
        return self.balance_a if a_to_b else self.balance_b

    def output_balance(self, a_to_b: bool) -> int:
        return self.balance_b if a_to_b else self.balance_a

    def should_attack(
        self, pending: PendingSwap, pool: PoolState
    ) -> Optional[SandwichOutcome]:
        """
        Predict a sandwich on ``pending`` without mutating anything.

        Returns:
            The predicted outcome if it is profitable, otherwise None
        """
        prediction = optimal_frontrun(
            pool,
            pending.amount_in,
            pending.a_to_b,
            self.input_balance(pending.a_to_b),
            self.heuristic,
        )
        if not prediction.executed or not prediction.success:
            return None
        return prediction

    def can_fund_backrun(self, a_to_b: bool, amount: int) -> bool:
        """Whether the output-side balance covers a back-run of ``amount``."""
        return self.output_balance(a_to_b) >= amount

    def execute_sandwich(
        self, pending: PendingSwap, pool: PoolState
    ) -> SandwichOutcome:
        """
        Sandwich ``pending`` on the live pool if profitable.

        An unprofitable or unaffordable attack is returned as a skipped
        outcome with nothing mutated. If the back-run cannot be funded once
        the front-run has settled, the outcome is aborted and the front-run
        input is booked as loss.
        """
        slot = self.clock.now()
        a_to_b = pending.a_to_b

        prediction = self.should_attack(pending, pool)
        if prediction is None:
            self.stats.skipped_attacks += 1
            logger.debug(
                f"Skipping unprofitable sandwich on {pending.trader} "
                f"{pending.amount_in} {direction_label(a_to_b)}"
            )
            return SandwichOutcome.skipped("unprofitable", slot=slot)

        frontrun_amount = prediction.frontrun_amount
        if self.input_balance(a_to_b) < frontrun_amount:
            self.stats.skipped_attacks += 1
            logger.warning(
                f"{self.name} cannot fund front-run of {frontrun_amount}, skipping"
            )
            return SandwichOutcome.skipped("insufficient balance", slot=slot)

        def settle_frontrun(received: int) -> bool:
            if a_to_b:
                self.balance_a -= frontrun_amount
                self.balance_b += received
            else:
                self.balance_b -= frontrun_amount
                self.balance_a += received
            return self.can_fund_backrun(a_to_b, received)

        outcome = run_sandwich_legs(
            pool,
            pending.amount_in,
            a_to_b,
            frontrun_amount,
            can_backrun=settle_frontrun,
        )
        outcome = replace(outcome, slot=slot)

        if not outcome.executed:
            self.stats.failed_attacks += 1
            self.stats.total_profit += outcome.profit
            logger.warning(
                f"{self.name} aborted back-run after front-run of {frontrun_amount}"
            )
            return outcome

        # back-run leg
        if a_to_b:
            self.balance_b -= outcome.backrun_amount
            self.balance_a += outcome.backrun_output
        else:
            self.balance_a -= outcome.backrun_amount
            self.balance_b += outcome.backrun_output

        self.stats.total_profit += outcome.profit
        if outcome.success:
            self.stats.successful_attacks += 1
        else:
            self.stats.failed_attacks += 1

        if outcome.profit != prediction.profit:
            logger.warning(
                f"Realised profit {outcome.profit} differs from prediction "
                f"{prediction.profit}"
            )

        logger.debug(
            f"{self.name} sandwiched {pending.trader}: front-run={frontrun_amount} "
            f"profit={outcome.profit} victim_loss={outcome.victim_loss}"
        )
        return outcome

    def reset(self, capital_a: int, capital_b: int) -> None:
        self.balance_a = capital_a
        self.balance_b = capital_b
        self.stats = AttackerStats()
