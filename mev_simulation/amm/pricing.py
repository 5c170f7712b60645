"""
Constant-product pricing engine.

Implements fee deduction, the x*y=k output formula, price impact and
minimum-output calculation in exact integer arithmetic. Python integers are
arbitrary precision, so every intermediate product is exact and the floor
divisions match an on-chain u128 settlement bit for bit.
"""

from ..constants import BPS_DENOMINATOR, MAX_PRICE_IMPACT_BPS, U64_MAX
from ..utils import bps_of
from .types import PoolState, SwapOutcome


def quote(pool: PoolState, amount_in: int, a_to_b: bool) -> SwapOutcome:
    """
    Price a swap without touching the pool.

    Args:
        pool: Pool to price against
        amount_in: Gross input amount, fee included
        a_to_b: True to sell token A for token B

    Returns:
        SwapOutcome with output, fee and price impact. A pool with an empty
        reserve on either side yields zero output and maximal impact.
    """
    reserve_in, reserve_out = pool.reserves(a_to_b)

    fee = bps_of(amount_in, pool.fee_bps)
    amount_in_net = amount_in - fee

    if reserve_in == 0 or reserve_out == 0:
        return SwapOutcome(
            amount_out=0, fee_charged=fee, price_impact_bps=MAX_PRICE_IMPACT_BPS
        )

    amount_out = amount_in_net * reserve_out // (reserve_in + amount_in_net)

    ideal_output = amount_in_net * reserve_out // reserve_in
    if ideal_output == 0:
        price_impact_bps = 0
    else:
        price_impact_bps = (ideal_output - amount_out) * BPS_DENOMINATOR // ideal_output

    return SwapOutcome(
        amount_out=amount_out, fee_charged=fee, price_impact_bps=price_impact_bps
    )


def apply_swap(pool: PoolState, amount_in: int, a_to_b: bool) -> SwapOutcome:
    """
    Price a swap and settle it against the pool in place.

    The full fee-inclusive input is added to the input reserve, so fees
    accrue to the pool and ``k`` never decreases. Reserves saturate at
    ``[0, U64_MAX]`` instead of wrapping.
    """
    outcome = quote(pool, amount_in, a_to_b)
    reserve_in, reserve_out = pool.reserves(a_to_b)

    new_in = min(reserve_in + amount_in, U64_MAX)
    new_out = max(reserve_out - outcome.amount_out, 0)

    if a_to_b:
        pool.reserve_a, pool.reserve_b = new_in, new_out
    else:
        pool.reserve_b, pool.reserve_a = new_in, new_out
    return outcome


def calculate_min_output(
    pool: PoolState, amount_in: int, a_to_b: bool, slippage_bps: int
) -> int:
    """Quoted output reduced by the slippage tolerance."""
    amount_out = quote(pool, amount_in, a_to_b).amount_out
    return amount_out - bps_of(amount_out, slippage_bps)


def k(pool: PoolState) -> int:
    """Constant-product invariant ``reserve_a * reserve_b``."""
    return pool.reserve_a * pool.reserve_b


def price_a_in_b(pool: PoolState) -> float:
    """Spot price of one A in units of B (0.0 on an empty A reserve)."""
    if pool.reserve_a == 0:
        return 0.0
    return pool.reserve_b / pool.reserve_a


def price_b_in_a(pool: PoolState) -> float:
    """Spot price of one B in units of A (0.0 on an empty B reserve)."""
    if pool.reserve_b == 0:
        return 0.0
    return pool.reserve_a / pool.reserve_b
