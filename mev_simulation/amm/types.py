"""
Core data types for the constant-product pool model.
"""

from dataclasses import dataclass

from ..constants import MAX_FEE_BPS, U64_MAX
from ..exceptions import ValidationError


@dataclass
class PoolState:
    """
    Reserves and fee of a two-asset constant-product pool.

    Plain value type: ``copy()`` produces an independent pool so branches
    can be snapshotted and restored by assignment.

    Attributes:
        reserve_a: Reserve of token A in base units
        reserve_b: Reserve of token B in base units
        fee_bps: Swap fee in basis points (0-10000)
    """

    reserve_a: int
    reserve_b: int
    fee_bps: int

    def __post_init__(self):
        for name in ("reserve_a", "reserve_b"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= U64_MAX:
                raise ValidationError(
                    f"{name} must be an integer in [0, {U64_MAX}], got {value!r}",
                    details={"field": name, "value": value},
                )
        if not isinstance(self.fee_bps, int) or not 0 <= self.fee_bps <= MAX_FEE_BPS:
            raise ValidationError(
                f"fee_bps must be an integer in [0, {MAX_FEE_BPS}], got {self.fee_bps!r}",
                details={"field": "fee_bps", "value": self.fee_bps},
            )

    def reserves(self, a_to_b: bool):
        """Return ``(reserve_in, reserve_out)`` for the given direction."""
        if a_to_b:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a

    def copy(self) -> "PoolState":
        return PoolState(self.reserve_a, self.reserve_b, self.fee_bps)


@dataclass(frozen=True)
class SwapOutcome:
    """
    Result of pricing one swap against a pool.

    Attributes:
        amount_out: Output tokens delivered to the trader
        fee_charged: Fee withheld from the input amount
        price_impact_bps: Shortfall against the no-impact linear price, in bps
    """

    amount_out: int
    fee_charged: int
    price_impact_bps: int
