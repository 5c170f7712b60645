"""
Live pool tracker with per-transaction snapshot history.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..amm.pricing import price_a_in_b
from ..amm.types import PoolState
from ..constants import Scenario
from ..interfaces import SlotClock


@dataclass(frozen=True)
class PoolSnapshot:
    """Pool reserves at the end of one scenario branch."""

    transaction_id: int
    scenario: Scenario
    reserve_a: int
    reserve_b: int
    price_a_in_b: float
    slot: int


class SimulatedPool:
    """Owns the live PoolState and records snapshots of it."""

    def __init__(self, initial: PoolState, clock: Optional[SlotClock] = None):
        self._initial = initial.copy()
        self.state = initial.copy()
        self.clock = clock or SlotClock()
        self.history: List[PoolSnapshot] = []

    def snapshot(self, transaction_id: int, scenario: Scenario) -> PoolSnapshot:
        """Record the current reserves tagged with a transaction and scenario."""
        snap = PoolSnapshot(
            transaction_id=transaction_id,
            scenario=scenario,
            reserve_a=self.state.reserve_a,
            reserve_b=self.state.reserve_b,
            price_a_in_b=price_a_in_b(self.state),
            slot=self.clock.now(),
        )
        self.history.append(snap)
        return snap

    def clone_state(self) -> PoolState:
        return self.state.copy()

    def set_state(self, state: PoolState) -> None:
        """Replace the live reserves with an independent copy of ``state``."""
        self.state = state.copy()

    def reset(self) -> None:
        """Restore the initial reserves and drop the history."""
        self.state = self._initial.copy()
        self.history = []
