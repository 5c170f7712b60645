"""
Trade actors: unprotected traders, commit-reveal traders and the attacker.
"""

from .normal_trader import NormalTrader
from .protected_trader import ProtectedTradeResult, ProtectedTrader
from .sandwich_attacker import AttackerStats, SandwichAttacker
from .types import PendingSwap, TradeRecord

__all__ = [
    "AttackerStats",
    "NormalTrader",
    "PendingSwap",
    "ProtectedTradeResult",
    "ProtectedTrader",
    "SandwichAttacker",
    "TradeRecord",
]
