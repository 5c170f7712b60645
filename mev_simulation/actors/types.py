"""
Data types shared by the trade actors.
"""

from dataclasses import dataclass

from ..constants import Scenario
from ..utils import calculate_percentage


@dataclass(frozen=True)
class PendingSwap:
    """A swap visible to the attacker before it settles."""

    trader: str
    amount_in: int
    a_to_b: bool


@dataclass(frozen=True)
class TradeRecord:
    """
    Immutable result of one settled trade.

    Attributes:
        trade_id: Index of the simulated transaction
        trader: Name of the actor that traded
        scenario: Branch the trade settled in
        amount_in: Gross input amount
        a_to_b: Swap direction
        expected_out: Output quoted before any attacker could act
        actual_out: Output actually received
        loss: ``max(0, expected_out - actual_out)``
        fee_paid: Fee withheld by the pool
        price_impact_bps: Price impact of the settled swap
        was_attacked: True when the trade was the middle leg of a sandwich
        slot: Logical slot of settlement
    """

    trade_id: int
    trader: str
    scenario: Scenario
    amount_in: int
    a_to_b: bool
    expected_out: int
    actual_out: int
    loss: int
    fee_paid: int
    price_impact_bps: int
    was_attacked: bool
    slot: int

    @property
    def loss_percentage(self) -> float:
        return calculate_percentage(self.loss, self.expected_out)
