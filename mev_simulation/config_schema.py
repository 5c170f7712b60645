"""
Configuration schema validation using Pydantic
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_FRONTRUN_RESERVE_DIVISOR,
    DEFAULT_FRONTRUN_VICTIM_DIVISOR,
    DEFAULT_PROTECTED_SLIPPAGE_BPS,
    MAX_FEE_BPS,
    MAX_SLIPPAGE_BPS,
    MIN_REVEAL_DELAY_SLOTS,
    U64_MAX,
)


class SimulationConfig(BaseModel):
    """Parameters of one simulation run"""

    total_transactions: int = Field(
        default=1000, ge=1, description="Number of synthetic transactions"
    )
    attack_probability: float = Field(
        default=0.8, ge=0, le=1.0, description="Chance the attacker targets a swap"
    )
    min_swap_amount: int = Field(
        default=100_000_000, ge=1, le=U64_MAX, description="Smallest swap (base units)"
    )
    max_swap_amount: int = Field(
        default=5_000_000_000, ge=1, le=U64_MAX, description="Largest swap (base units)"
    )
    initial_pool_a: int = Field(default=1_000_000_000_000, ge=0, le=U64_MAX)
    initial_pool_b: int = Field(default=1_000_000_000_000, ge=0, le=U64_MAX)
    fee_bps: int = Field(
        default=30, ge=0, le=MAX_FEE_BPS, description="Pool fee in basis points"
    )
    attacker_capital: int = Field(
        default=100_000_000_000,
        ge=0,
        le=U64_MAX,
        description="Attacker starting balance of each token",
    )
    num_traders: int = Field(default=10, ge=1, le=10_000)
    trader_balance_a: int = Field(default=50_000_000_000, ge=0, le=U64_MAX)
    trader_balance_b: int = Field(default=50_000_000_000, ge=0, le=U64_MAX)
    protected_slippage_bps: int = Field(
        default=DEFAULT_PROTECTED_SLIPPAGE_BPS,
        ge=0,
        le=MAX_SLIPPAGE_BPS,
        description="Slippage tolerance committed by protected traders",
    )
    reveal_delay_slots: int = Field(
        default=MIN_REVEAL_DELAY_SLOTS, ge=MIN_REVEAL_DELAY_SLOTS, le=1000
    )
    frontrun_victim_divisor: int = Field(
        default=DEFAULT_FRONTRUN_VICTIM_DIVISOR, ge=1, le=1000
    )
    frontrun_reserve_divisor: int = Field(
        default=DEFAULT_FRONTRUN_RESERVE_DIVISOR, ge=1, le=1000
    )
    seed: Optional[int] = Field(default=None, ge=0, le=2**32 - 1)

    @field_validator("attack_probability")
    @classmethod
    def validate_attack_probability(cls, v):
        if v != v:
            raise ValueError("attack_probability cannot be NaN")
        return v

    @model_validator(mode="after")
    def validate_swap_range(self):
        if self.max_swap_amount < self.min_swap_amount:
            raise ValueError(
                f"max_swap_amount ({self.max_swap_amount}) must be >= "
                f"min_swap_amount ({self.min_swap_amount})"
            )
        return self

    model_config = {
        "extra": "forbid",  # Disallow extra fields
        "validate_assignment": True,
    }


def validate_simulation_config(config_dict: Dict) -> SimulationConfig:
    """
    Validate a simulation configuration dictionary

    Args:
        config_dict: Dictionary representation of simulation config

    Returns:
        Validated SimulationConfig object

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return SimulationConfig(**config_dict)
