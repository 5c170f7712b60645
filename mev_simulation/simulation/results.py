"""
Result aggregates produced by a simulation run.

The summary is always recomputed from the full record collections; nothing
updates it field by field.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..actors.types import TradeRecord
from ..config_schema import SimulationConfig
from ..constants import Scenario, SkipReason
from ..optimizer import SandwichOutcome
from ..utils import safe_json_dump, to_serializable
from .pool_state import PoolSnapshot


@dataclass(frozen=True)
class SkippedBranch:
    """A scenario branch that produced no trade."""

    transaction_id: int
    scenario: Scenario
    reason: SkipReason


@dataclass(frozen=True)
class SimulationSummary:
    """
    Aggregate statistics over a full run.

    Attributes:
        total_transactions: Settled unprotected trades
        attack_attempts: Sandwich attempts recorded (including skipped ones)
        successful_attacks: Attempts that ended in profit
        attack_success_rate: ``successful / attempts`` as a percentage
        total_mev_extracted: Sum of attacker profit (signed)
        total_victim_losses: Sum of victim loss across attempts
        avg_loss_per_attack: Victim loss per successful attack
        total_protected_savings: Victim losses the protected branch avoided
        total_volume: Sum of unprotected input amounts
        avg_trade_amount: Mean unprotected input amount
        unprotected_total_loss: Sum of losses on unprotected records
        protected_total_loss: Sum of losses on protected records
        protected_transactions: Settled protected trades
        skipped_unprotected: Unprotected branches that produced no trade
        skipped_protected: Protected branches that produced no trade
    """

    total_transactions: int
    attack_attempts: int
    successful_attacks: int
    attack_success_rate: float
    total_mev_extracted: int
    total_victim_losses: int
    avg_loss_per_attack: float
    total_protected_savings: int
    total_volume: int
    avg_trade_amount: float
    unprotected_total_loss: int
    protected_total_loss: int
    protected_transactions: int
    skipped_unprotected: int
    skipped_protected: int

    @classmethod
    def from_records(
        cls,
        unprotected: List[TradeRecord],
        protected: List[TradeRecord],
        sandwiches: List[SandwichOutcome],
        skipped: Optional[List[SkippedBranch]] = None,
    ) -> "SimulationSummary":
        skipped = skipped or []
        total_transactions = len(unprotected)
        attack_attempts = len(sandwiches)
        successful_attacks = sum(1 for s in sandwiches if s.success)

        total_victim_losses = sum(s.victim_loss for s in sandwiches)
        total_volume = sum(t.amount_in for t in unprotected)

        return cls(
            total_transactions=total_transactions,
            attack_attempts=attack_attempts,
            successful_attacks=successful_attacks,
            attack_success_rate=(
                successful_attacks / attack_attempts * 100 if attack_attempts else 0.0
            ),
            total_mev_extracted=sum(s.profit for s in sandwiches),
            total_victim_losses=total_victim_losses,
            avg_loss_per_attack=(
                total_victim_losses / successful_attacks if successful_attacks else 0.0
            ),
            total_protected_savings=total_victim_losses,
            total_volume=total_volume,
            avg_trade_amount=(
                total_volume / total_transactions if total_transactions else 0.0
            ),
            unprotected_total_loss=sum(t.loss for t in unprotected),
            protected_total_loss=sum(t.loss for t in protected),
            protected_transactions=len(protected),
            skipped_unprotected=sum(
                1 for s in skipped if s.scenario == Scenario.UNPROTECTED
            ),
            skipped_protected=sum(
                1 for s in skipped if s.scenario == Scenario.PROTECTED
            ),
        )


@dataclass
class SimulationResults:
    """Everything a run produced, in transaction order."""

    config: SimulationConfig
    unprotected_trades: List[TradeRecord] = field(default_factory=list)
    protected_trades: List[TradeRecord] = field(default_factory=list)
    sandwiches: List[SandwichOutcome] = field(default_factory=list)
    pool_snapshots: List[PoolSnapshot] = field(default_factory=list)
    skipped: List[SkippedBranch] = field(default_factory=list)
    summary: Optional[SimulationSummary] = None
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible representation of the run."""
        return {
            "config": self.config.model_dump(),
            "seed": self.seed,
            "unprotected_trades": to_serializable(self.unprotected_trades),
            "protected_trades": to_serializable(self.protected_trades),
            "sandwiches": [
                dict(to_serializable(s), success=s.success) for s in self.sandwiches
            ],
            "pool_snapshots": to_serializable(self.pool_snapshots),
            "skipped": to_serializable(self.skipped),
            "summary": to_serializable(self.summary),
        }

    def to_json(self, **kwargs) -> str:
        return safe_json_dump(self.to_dict(), **kwargs)
