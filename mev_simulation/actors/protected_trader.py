"""
Commit-reveal protected trader.

The trader first publishes only the hash of its swap intent. After at least
one slot it reveals the intent, the hash is checked and the swap settles at
the price of the reveal slot. Nothing about the amount is visible while the
commitment is pending, so there is nothing to front-run.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..amm.pricing import apply_swap, calculate_min_output, quote
from ..amm.types import PoolState
from ..commitment import (
    Cancelled,
    Committed,
    CommitmentState,
    NoCommitment,
    Revealed,
    SwapIntent,
    hash_intent,
    verify_intent,
)
from ..constants import (
    MAX_SLIPPAGE_BPS,
    MIN_COMMIT_AMOUNT,
    MIN_REVEAL_DELAY_SLOTS,
    Scenario,
    U64_MAX,
    direction_label,
)
from ..exceptions import (
    AmountTooSmallError,
    CommitmentExistsError,
    CommitmentNotFoundError,
    CommitRevealError,
    HashMismatchError,
    InsufficientBalanceError,
    InvalidIntentError,
    RevealTooEarlyError,
    SlippageExceededError,
    SlippageTooHighError,
)
from ..interfaces import NonceSource, SlotClock
from ..utils import hash_to_hex
from .types import TradeRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtectedTradeResult:
    """A settled protected trade together with its commitment metadata."""

    commitment_hash: str
    committed_at: int
    revealed_at: int
    record: TradeRecord

    @property
    def slots_waited(self) -> int:
        return self.revealed_at - self.committed_at


class ProtectedTrader:
    """Trader that swaps through the commit-reveal protocol."""

    def __init__(
        self,
        name: str,
        balance_a: int,
        balance_b: int,
        clock: Optional[SlotClock] = None,
        nonce_source: Optional[NonceSource] = None,
        min_delay_slots: int = MIN_REVEAL_DELAY_SLOTS,
    ):
        self.name = name
        self.balance_a = balance_a
        self.balance_b = balance_b
        self.clock = clock or SlotClock()
        self.nonce_source = nonce_source
        self.min_delay_slots = max(min_delay_slots, MIN_REVEAL_DELAY_SLOTS)
        self.state: CommitmentState = NoCommitment()
        self.trades_executed = 0

    @property
    def has_live_commitment(self) -> bool:
        return isinstance(self.state, Committed)

    def input_balance(self, a_to_b: bool) -> int:
        return self.balance_a if a_to_b else self.balance_b

    def can_trade(self, amount_in: int, a_to_b: bool) -> bool:
        return 0 < amount_in <= self.input_balance(a_to_b)

    def try_commit(
        self, amount_in: int, min_out: int, slippage_bps: int, a_to_b: bool
    ) -> bytes:
        """
        Commit to a swap intent and return its hash.

        Raises:
            CommitmentExistsError: If a commitment is already live
            SlippageTooHighError: If ``slippage_bps`` exceeds the protocol maximum
            AmountTooSmallError: If ``amount_in`` is below the protocol minimum
            InvalidIntentError: If an intent field is outside its integer width
            InsufficientBalanceError: If the input balance cannot cover the swap
        """
        if self.has_live_commitment:
            raise CommitmentExistsError(
                f"{self.name} already has a live commitment",
                details={"commitment": self.state.hash_hex},
            )
        if slippage_bps < 0 or not 0 <= min_out <= U64_MAX or amount_in > U64_MAX:
            raise InvalidIntentError(
                f"Intent out of range: amount_in={amount_in} min_out={min_out} "
                f"slippage_bps={slippage_bps}"
            )
        if slippage_bps > MAX_SLIPPAGE_BPS:
            raise SlippageTooHighError(
                f"Slippage {slippage_bps} bps exceeds maximum {MAX_SLIPPAGE_BPS} bps"
            )
        if amount_in < MIN_COMMIT_AMOUNT:
            raise AmountTooSmallError(
                f"Amount {amount_in} is below minimum {MIN_COMMIT_AMOUNT}"
            )
        available = self.input_balance(a_to_b)
        if available < amount_in:
            raise InsufficientBalanceError(
                f"{self.name} cannot fund {amount_in} {direction_label(a_to_b)}",
                required=amount_in,
                available=available,
            )

        intent = SwapIntent.create(amount_in, min_out, slippage_bps, self.nonce_source)
        commitment_hash = hash_intent(intent)
        self.state = Committed(
            owner=self.name,
            commitment_hash=commitment_hash,
            intent=intent,
            a_to_b=a_to_b,
            created_at=self.clock.now(),
        )
        logger.debug(
            f"{self.name} committed {hash_to_hex(commitment_hash)[:16]} "
            f"at slot {self.clock.now()}"
        )
        return commitment_hash

    def commit(
        self, amount_in: int, min_out: int, slippage_bps: int, a_to_b: bool
    ) -> Optional[bytes]:
        """Commit to a swap intent; returns None and leaves state alone on failure."""
        try:
            return self.try_commit(amount_in, min_out, slippage_bps, a_to_b)
        except (CommitRevealError, InsufficientBalanceError) as e:
            logger.debug(f"Commit rejected for {self.name}: {e}")
            return None

    def try_reveal(
        self,
        pool: PoolState,
        intent: Optional[SwapIntent] = None,
        trade_id: int = 0,
    ) -> TradeRecord:
        """
        Reveal the committed intent and settle the swap against ``pool``.

        Args:
            pool: Pool to settle against
            intent: Payload to reveal; defaults to the committed intent
            trade_id: Transaction index stamped on the record

        Returns:
            TradeRecord of the settled swap, never marked as attacked

        Raises:
            CommitmentNotFoundError: If no commitment is live
            RevealTooEarlyError: If the minimum delay has not elapsed
            HashMismatchError: If ``intent`` does not hash to the commitment
            InsufficientBalanceError: If the input balance no longer covers the swap
            SlippageExceededError: If the output would fall below ``min_out``
        """
        state = self.state
        if not isinstance(state, Committed):
            raise CommitmentNotFoundError(f"{self.name} has no live commitment")

        now = self.clock.now()
        slots_waited = now - state.created_at
        if slots_waited < self.min_delay_slots:
            raise RevealTooEarlyError(
                f"Reveal after {slots_waited} slot(s), need {self.min_delay_slots}",
                slots_waited=slots_waited,
                required=self.min_delay_slots,
            )

        if intent is None:
            intent = state.intent
        if not verify_intent(intent, state.commitment_hash):
            raise HashMismatchError(
                "Revealed intent does not match commitment",
                details={"commitment": state.hash_hex},
            )

        a_to_b = state.a_to_b
        available = self.input_balance(a_to_b)
        if available < intent.amount_in:
            raise InsufficientBalanceError(
                f"{self.name} cannot fund reveal of {intent.amount_in}",
                required=intent.amount_in,
                available=available,
            )

        expected = quote(pool, intent.amount_in, a_to_b)
        if expected.amount_out < intent.min_out:
            raise SlippageExceededError(
                f"Output {expected.amount_out} below committed minimum {intent.min_out}",
                expected_min=intent.min_out,
                actual=expected.amount_out,
            )

        settled = apply_swap(pool, intent.amount_in, a_to_b)
        if a_to_b:
            self.balance_a -= intent.amount_in
            self.balance_b += settled.amount_out
        else:
            self.balance_b -= intent.amount_in
            self.balance_a += settled.amount_out

        self.state = Revealed(
            owner=self.name,
            commitment_hash=state.commitment_hash,
            revealed_at=now,
        )
        self.trades_executed += 1

        logger.debug(
            f"{self.name} revealed {state.hash_hex[:16]} after {slots_waited} slot(s): "
            f"{intent.amount_in} {direction_label(a_to_b)} -> {settled.amount_out}"
        )

        return TradeRecord(
            trade_id=trade_id,
            trader=self.name,
            scenario=Scenario.PROTECTED,
            amount_in=intent.amount_in,
            a_to_b=a_to_b,
            expected_out=expected.amount_out,
            actual_out=settled.amount_out,
            loss=max(0, expected.amount_out - settled.amount_out),
            fee_paid=settled.fee_charged,
            price_impact_bps=settled.price_impact_bps,
            was_attacked=False,
            slot=now,
        )

    def reveal(
        self,
        pool: PoolState,
        intent: Optional[SwapIntent] = None,
        trade_id: int = 0,
    ) -> Optional[TradeRecord]:
        """Reveal and settle; returns None and leaves the commitment live on failure."""
        try:
            return self.try_reveal(pool, intent=intent, trade_id=trade_id)
        except (CommitRevealError, InsufficientBalanceError) as e:
            logger.debug(f"Reveal rejected for {self.name}: {e}")
            return None

    def cancel(self) -> bool:
        """Abandon the live commitment. Returns False if there was none."""
        state = self.state
        if not isinstance(state, Committed):
            self.state = NoCommitment()
            return False
        self.state = Cancelled(
            owner=self.name,
            commitment_hash=state.commitment_hash,
            cancelled_at=self.clock.now(),
        )
        logger.debug(f"{self.name} cancelled {state.hash_hex[:16]}")
        return True

    def execute_protected_trade(
        self,
        pool: PoolState,
        amount_in: int,
        a_to_b: bool,
        slippage_bps: int,
        trade_id: int = 0,
        delay_slots: Optional[int] = None,
    ) -> Optional[ProtectedTradeResult]:
        """
        Run commit, advance the clock, then reveal.

        The minimum output is quoted on ``pool`` at commit time. A failed
        reveal cancels the commitment so the trader is free to commit again.
        """
        min_out = calculate_min_output(pool, amount_in, a_to_b, slippage_bps)
        commitment_hash = self.commit(amount_in, min_out, slippage_bps, a_to_b)
        if commitment_hash is None:
            return None
        committed_at = self.clock.now()

        self.clock.advance(delay_slots or self.min_delay_slots)

        record = self.reveal(pool, trade_id=trade_id)
        if record is None:
            self.cancel()
            return None

        return ProtectedTradeResult(
            commitment_hash=hash_to_hex(commitment_hash),
            committed_at=committed_at,
            revealed_at=record.slot,
            record=record,
        )

    def reset(self, balance_a: int, balance_b: int) -> None:
        self.balance_a = balance_a
        self.balance_b = balance_b
        self.state = NoCommitment()
        self.trades_executed = 0
