"""
Constant-product AMM model: pool state and the integer pricing engine.
"""

from .pricing import (
    apply_swap,
    calculate_min_output,
    k,
    price_a_in_b,
    price_b_in_a,
    quote,
)
from .types import PoolState, SwapOutcome

__all__ = [
    "PoolState",
    "SwapOutcome",
    "quote",
    "apply_swap",
    "calculate_min_output",
    "k",
    "price_a_in_b",
    "price_b_in_a",
]
