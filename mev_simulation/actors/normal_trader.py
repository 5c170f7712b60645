"""
Unprotected trader: submits swaps in the clear, visible to the attacker.
"""

import logging
from typing import Optional

from ..amm.pricing import apply_swap, quote
from ..amm.types import PoolState, SwapOutcome
from ..constants import Scenario, direction_label
from ..exceptions import InsufficientBalanceError, ValidationError
from ..interfaces import SlotClock
from ..optimizer import SandwichOutcome
from .types import PendingSwap, TradeRecord

logger = logging.getLogger(__name__)


class NormalTrader:
    """Trader holding balances of both tokens and swapping without protection."""

    def __init__(
        self,
        name: str,
        balance_a: int,
        balance_b: int,
        clock: Optional[SlotClock] = None,
    ):
        self.name = name
        self.balance_a = balance_a
        self.balance_b = balance_b
        self.clock = clock or SlotClock()
        self.trades_executed = 0
        self.total_loss = 0

    def input_balance(self, a_to_b: bool) -> int:
        return self.balance_a if a_to_b else self.balance_b

    def check_trade(self, amount_in: int, a_to_b: bool) -> None:
        """
        Validate a trade before it touches the pool.

        Raises:
            ValidationError: If the amount is not positive
            InsufficientBalanceError: If the input balance cannot cover it
        """
        if amount_in <= 0:
            raise ValidationError(
                f"Trade amount must be positive, got {amount_in}",
                details={"trader": self.name},
            )
        available = self.input_balance(a_to_b)
        if available < amount_in:
            raise InsufficientBalanceError(
                f"{self.name} cannot fund {amount_in} {direction_label(a_to_b)}",
                required=amount_in,
                available=available,
            )

    def can_trade(self, amount_in: int, a_to_b: bool) -> bool:
        try:
            self.check_trade(amount_in, a_to_b)
        except (ValidationError, InsufficientBalanceError):
            return False
        return True

    def quote_expected(self, pool: PoolState, amount_in: int, a_to_b: bool) -> SwapOutcome:
        """Output the trader expects, quoted before anyone can react."""
        return quote(pool, amount_in, a_to_b)

    def pending(self, amount_in: int, a_to_b: bool) -> PendingSwap:
        return PendingSwap(trader=self.name, amount_in=amount_in, a_to_b=a_to_b)

    def trade(
        self,
        pool: PoolState,
        amount_in: int,
        a_to_b: bool,
        *,
        trade_id: int = 0,
        expected: Optional[SwapOutcome] = None,
        sandwich: Optional[SandwichOutcome] = None,
    ) -> Optional[TradeRecord]:
        """
        Settle one swap and update balances.

        If ``sandwich`` already settled this trade as its middle leg, the
        realised victim output is taken from it and the pool is left alone.
        Otherwise the swap is applied directly to ``pool``.

        Returns:
            TradeRecord, or None if the trade was rejected
        """
        try:
            self.check_trade(amount_in, a_to_b)
        except (ValidationError, InsufficientBalanceError) as e:
            logger.debug(f"Trade rejected: {e}")
            return None

        if expected is None:
            expected = self.quote_expected(pool, amount_in, a_to_b)

        if sandwich is not None and sandwich.victim_leg_applied:
            actual_out = sandwich.victim_actual_out
            fee_paid = sandwich.victim_fee
            price_impact_bps = sandwich.victim_price_impact_bps
            was_attacked = True
        else:
            settled = apply_swap(pool, amount_in, a_to_b)
            actual_out = settled.amount_out
            fee_paid = settled.fee_charged
            price_impact_bps = settled.price_impact_bps
            was_attacked = False

        if a_to_b:
            self.balance_a -= amount_in
            self.balance_b += actual_out
        else:
            self.balance_b -= amount_in
            self.balance_a += actual_out

        loss = max(0, expected.amount_out - actual_out)
        self.trades_executed += 1
        self.total_loss += loss

        logger.debug(
            f"{self.name} swapped {amount_in} {direction_label(a_to_b)}: "
            f"expected={expected.amount_out} actual={actual_out} "
            f"attacked={was_attacked}"
        )

        return TradeRecord(
            trade_id=trade_id,
            trader=self.name,
            scenario=Scenario.UNPROTECTED,
            amount_in=amount_in,
            a_to_b=a_to_b,
            expected_out=expected.amount_out,
            actual_out=actual_out,
            loss=loss,
            fee_paid=fee_paid,
            price_impact_bps=price_impact_bps,
            was_attacked=was_attacked,
            slot=self.clock.now(),
        )

    def reset(self, balance_a: int, balance_b: int) -> None:
        self.balance_a = balance_a
        self.balance_b = balance_b
        self.trades_executed = 0
        self.total_loss = 0
