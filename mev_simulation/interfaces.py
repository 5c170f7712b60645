"""
Dependency injection interfaces for deterministic simulation runs.

Provides lightweight protocols for random number generation, logical time
(slots) and nonce generation so scenario draws are reproducible in tests
while commitment nonces stay cryptographically random.
"""

import random
import secrets
from typing import Protocol, runtime_checkable

from .constants import NONCE_SIZE_BYTES


@runtime_checkable
class RandomProvider(Protocol):
    """Protocol for scenario random number generation."""

    def random(self) -> float:
        """Generate random float between 0.0 and 1.0."""
        ...

    def randint(self, a: int, b: int) -> int:
        """Generate random integer between a and b (inclusive)."""
        ...

    def seed(self, seed_value: int) -> None:
        """Set random seed for reproducibility."""
        ...


@runtime_checkable
class NonceSource(Protocol):
    """Protocol for commitment nonce generation."""

    def token_bytes(self, nbytes: int) -> bytes:
        """Return nbytes of random data."""
        ...


class SystemRandomProvider:
    """Scenario random provider backed by an unseeded generator."""

    def __init__(self, seed: int = None):
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Generate random float between 0.0 and 1.0."""
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        """Generate random integer between a and b (inclusive)."""
        return self._rng.randint(a, b)

    def seed(self, seed_value: int) -> None:
        """Set random seed for reproducibility."""
        self._rng.seed(seed_value)


class DeterministicRandomProvider:
    """Deterministic random provider for testing and reproducible runs."""

    def __init__(self, seed: int = 42):
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Generate random float between 0.0 and 1.0."""
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        """Generate random integer between a and b (inclusive)."""
        return self._rng.randint(a, b)

    def seed(self, seed_value: int) -> None:
        """Set random seed."""
        self._rng = random.Random(seed_value)


class SecretsNonceSource:
    """Nonce source drawing from the operating system CSPRNG."""

    def token_bytes(self, nbytes: int = NONCE_SIZE_BYTES) -> bytes:
        return secrets.token_bytes(nbytes)


class SlotClock:
    """
    Logical slot counter used to enforce the commit-reveal delay.

    Independent of wall-clock time; the orchestrator shares one clock between
    the attacker, the traders and the pool tracker.
    """

    def __init__(self, start_slot: int = 0):
        self._slot = start_slot

    def now(self) -> int:
        """Get the current slot."""
        return self._slot

    def advance(self, slots: int = 1) -> int:
        """Advance the clock and return the new slot."""
        if slots < 0:
            raise ValueError("slot clock cannot move backwards")
        self._slot += slots
        return self._slot

    def set_slot(self, slot: int) -> None:
        """Set current slot to a specific value."""
        self._slot = slot


# Default providers - can be overridden for testing
_default_random_provider = SystemRandomProvider()
_default_nonce_source = SecretsNonceSource()


def get_random_provider() -> RandomProvider:
    """Get the current random provider instance."""
    return _default_random_provider


def set_random_provider(provider: RandomProvider) -> None:
    """Set the global random provider (mainly for testing)."""
    global _default_random_provider
    _default_random_provider = provider


def get_nonce_source() -> NonceSource:
    """Get the current nonce source."""
    return _default_nonce_source


def set_nonce_source(source: NonceSource) -> None:
    """Set the global nonce source (mainly for testing)."""
    global _default_nonce_source
    _default_nonce_source = source
