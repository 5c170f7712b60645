"""
Sandwich attack optimizer.

Sizes a front-run with a capped heuristic and plays the three legs
(front-run, victim, back-run) against a pool. The same leg routine is used
for the dry-run on a throwaway copy and for live execution, so predicted and
realised profit come from identical arithmetic.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .amm.pricing import apply_swap, quote
from .amm.types import PoolState
from .constants import (
    DEFAULT_FRONTRUN_RESERVE_DIVISOR,
    DEFAULT_FRONTRUN_VICTIM_DIVISOR,
    SandwichStatus,
    direction_label,
)
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrontrunHeuristic:
    """
    Front-run sizing rule: ``min(victim / victim_divisor, capital, reserve_in / reserve_divisor)``.

    The reserve cap bounds the attacker's own price impact; the victim cap
    approximates exploiting about half of the victim's impact.
    """

    victim_divisor: int = DEFAULT_FRONTRUN_VICTIM_DIVISOR
    reserve_divisor: int = DEFAULT_FRONTRUN_RESERVE_DIVISOR

    def __post_init__(self):
        if self.victim_divisor < 1 or self.reserve_divisor < 1:
            raise ValidationError(
                "front-run divisors must be at least 1",
                details={
                    "victim_divisor": self.victim_divisor,
                    "reserve_divisor": self.reserve_divisor,
                },
            )

    def frontrun_size(
        self, pool: PoolState, victim_amount: int, a_to_b: bool, capital: int
    ) -> int:
        reserve_in, _ = pool.reserves(a_to_b)
        return min(
            victim_amount // self.victim_divisor,
            capital,
            reserve_in // self.reserve_divisor,
        )


@dataclass(frozen=True)
class SandwichOutcome:
    """
    Result of one sandwich attempt, predicted or realised.

    Attributes:
        frontrun_amount: Attacker input on the front-run leg
        frontrun_output: Tokens received from the front-run
        backrun_amount: Attacker input on the back-run leg (the front-run output)
        backrun_output: Tokens received from the back-run
        profit: ``backrun_output - frontrun_amount``, signed
        victim_loss: Victim output shortfall against the pre-attack quote
        victim_expected_out: Victim output quoted on the pre-attack pool
        victim_actual_out: Victim output after being front-run
        victim_fee: Fee paid by the victim leg
        victim_price_impact_bps: Price impact of the victim leg
        status: executed, skipped or aborted
        slot: Logical slot the attempt happened in
        reason: Why the attempt was skipped or aborted
    """

    frontrun_amount: int = 0
    frontrun_output: int = 0
    backrun_amount: int = 0
    backrun_output: int = 0
    profit: int = 0
    victim_loss: int = 0
    victim_expected_out: int = 0
    victim_actual_out: int = 0
    victim_fee: int = 0
    victim_price_impact_bps: int = 0
    status: SandwichStatus = SandwichStatus.SKIPPED
    slot: int = 0
    reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.profit > 0

    @property
    def executed(self) -> bool:
        return self.status == SandwichStatus.EXECUTED

    @property
    def victim_leg_applied(self) -> bool:
        """True when the victim trade was settled as the middle leg."""
        return self.status in (SandwichStatus.EXECUTED, SandwichStatus.ABORTED)

    @classmethod
    def skipped(cls, reason: str, slot: int = 0) -> "SandwichOutcome":
        return cls(status=SandwichStatus.SKIPPED, slot=slot, reason=reason)


def run_sandwich_legs(
    pool: PoolState,
    victim_amount: int,
    a_to_b: bool,
    frontrun_amount: int,
    can_backrun: Optional[Callable[[int], bool]] = None,
) -> SandwichOutcome:
    """
    Play front-run, victim and back-run against ``pool`` in place.

    Args:
        pool: Pool to mutate (a copy for a dry-run, the live pool otherwise)
        victim_amount: Victim input amount
        a_to_b: Victim (and front-run) direction; the back-run goes the other way
        frontrun_amount: Attacker input on the front-run leg
        can_backrun: Optional check on the front-run output; when it returns
            False the back-run is not played and the front-run input is
            booked as a realised loss

    Returns:
        SandwichOutcome with status executed, or aborted if the back-run
        was refused
    """
    victim_expected = quote(pool, victim_amount, a_to_b)

    front = apply_swap(pool, frontrun_amount, a_to_b)
    victim = apply_swap(pool, victim_amount, a_to_b)
    victim_loss = max(0, victim_expected.amount_out - victim.amount_out)

    if can_backrun is not None and not can_backrun(front.amount_out):
        return SandwichOutcome(
            frontrun_amount=frontrun_amount,
            frontrun_output=front.amount_out,
            profit=-frontrun_amount,
            victim_loss=victim_loss,
            victim_expected_out=victim_expected.amount_out,
            victim_actual_out=victim.amount_out,
            victim_fee=victim.fee_charged,
            victim_price_impact_bps=victim.price_impact_bps,
            status=SandwichStatus.ABORTED,
            reason="back-run refused",
        )

    back = apply_swap(pool, front.amount_out, not a_to_b)

    return SandwichOutcome(
        frontrun_amount=frontrun_amount,
        frontrun_output=front.amount_out,
        backrun_amount=front.amount_out,
        backrun_output=back.amount_out,
        profit=back.amount_out - frontrun_amount,
        victim_loss=victim_loss,
        victim_expected_out=victim_expected.amount_out,
        victim_actual_out=victim.amount_out,
        victim_fee=victim.fee_charged,
        victim_price_impact_bps=victim.price_impact_bps,
        status=SandwichStatus.EXECUTED,
    )


def optimal_frontrun(
    pool: PoolState,
    victim_amount: int,
    a_to_b: bool,
    attacker_capital: int,
    heuristic: Optional[FrontrunHeuristic] = None,
) -> SandwichOutcome:
    """
    Size a front-run and predict its profit on a copy of ``pool``.

    The live pool is never mutated. A zero front-run size yields a skipped
    outcome with zero profit.
    """
    heuristic = heuristic or FrontrunHeuristic()
    frontrun_amount = heuristic.frontrun_size(
        pool, victim_amount, a_to_b, attacker_capital
    )

    if frontrun_amount <= 0:
        logger.debug(
            f"No front-run possible for {victim_amount} {direction_label(a_to_b)}"
        )
        return SandwichOutcome.skipped("front-run size is zero")

    prediction = run_sandwich_legs(pool.copy(), victim_amount, a_to_b, frontrun_amount)
    logger.debug(
        f"Predicted sandwich {direction_label(a_to_b)}: front-run={frontrun_amount} "
        f"profit={prediction.profit} victim_loss={prediction.victim_loss}"
    )
    return prediction
