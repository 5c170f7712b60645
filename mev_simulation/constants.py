"""
Constants and enums for the MEV simulation engine.

Centralizes numeric limits, protocol parameters and scenario tags shared by
the pricing engine, the actors and the orchestrator.
"""

from enum import Enum

# Integer widths of the settlement model
U64_MAX = 2**64 - 1
U16_MAX = 2**16 - 1

# Basis points
BPS_DENOMINATOR = 10_000
MAX_FEE_BPS = 10_000

# Price impact reported for a pool with no liquidity on either side
MAX_PRICE_IMPACT_BPS = 10_000

# Commit-reveal protocol
INTENT_SIZE_BYTES = 50  # 8 (amount_in) + 8 (min_out) + 2 (slippage) + 32 (nonce)
NONCE_SIZE_BYTES = 32
HASH_SIZE_BYTES = 32
MIN_REVEAL_DELAY_SLOTS = 1
MAX_SLIPPAGE_BPS = 1_000
MIN_COMMIT_AMOUNT = 1_000_000
DEFAULT_PROTECTED_SLIPPAGE_BPS = 100

# Sandwich heuristic defaults
DEFAULT_FRONTRUN_VICTIM_DIVISOR = 2
DEFAULT_FRONTRUN_RESERVE_DIVISOR = 10

# Base units per whole token (lamports per SOL)
BASE_UNITS_PER_TOKEN = 1_000_000_000

# Orchestrator progress logging cadence
PROGRESS_LOG_INTERVAL = 100


class Scenario(Enum):
    """Branch of a simulated transaction."""

    UNPROTECTED = "unprotected"
    PROTECTED = "protected"


class SandwichStatus(Enum):
    """Outcome of a single sandwich attempt."""

    EXECUTED = "executed"
    SKIPPED = "skipped"
    ABORTED = "aborted"


class SkipReason(Enum):
    """Why a branch produced no trade record."""

    INSUFFICIENT_BALANCE = "insufficient_balance"
    INVALID_AMOUNT = "invalid_amount"
    COMMIT_REJECTED = "commit_rejected"
    REVEAL_REJECTED = "reveal_rejected"


def direction_label(a_to_b: bool) -> str:
    """Human-readable swap direction."""
    return "A->B" if a_to_b else "B->A"
