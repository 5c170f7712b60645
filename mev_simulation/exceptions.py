"""
Exception hierarchy for the MEV simulation engine.

Provides specific exception types for configuration problems, actor-level
input validation and commit-reveal protocol failures. None of these abort a
simulation run: the actors and the orchestrator catch them and surface the
failure as "no trade occurred".
"""

from typing import Optional, Dict, Any


class MevSimulationError(Exception):
    """Base exception for all simulation related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(MevSimulationError):
    """Raised when there are configuration-related issues."""

    pass


class ValidationError(MevSimulationError):
    """Raised when validation of data or configuration fails."""

    pass


class InsufficientBalanceError(MevSimulationError):
    """Raised when an actor cannot fund the input side of a trade."""

    def __init__(
        self,
        message: str,
        required: Optional[int] = None,
        available: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.required = required
        self.available = available


class CommitRevealError(MevSimulationError):
    """Base class for commit-reveal protocol failures."""

    pass


class CommitmentExistsError(CommitRevealError):
    """Raised when committing while a commitment is still live."""

    pass


class CommitmentNotFoundError(CommitRevealError):
    """Raised when revealing without a live commitment."""

    pass


class RevealTooEarlyError(CommitRevealError):
    """Raised when the minimum commit-to-reveal delay has not elapsed."""

    def __init__(
        self,
        message: str,
        slots_waited: Optional[int] = None,
        required: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.slots_waited = slots_waited
        self.required = required


class HashMismatchError(CommitRevealError):
    """Raised when the revealed intent does not hash to the stored commitment."""

    pass


class SlippageTooHighError(CommitRevealError):
    """Raised when the slippage tolerance exceeds the protocol maximum."""

    pass


class AmountTooSmallError(CommitRevealError):
    """Raised when a committed amount is below the protocol minimum."""

    pass


class InvalidIntentError(CommitRevealError):
    """Raised when intent fields fall outside their on-chain integer widths."""

    pass


class SlippageExceededError(CommitRevealError):
    """Raised when the realised output would fall below the committed min_out."""

    def __init__(
        self,
        message: str,
        expected_min: Optional[int] = None,
        actual: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.expected_min = expected_min
        self.actual = actual
