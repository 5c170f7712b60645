"""
Commitment codec for the commit-reveal swap protocol.

A protected trader publishes only the SHA-256 of its swap intent. The intent
is serialized into a fixed 50-byte little-endian layout::

    amount_in (u64) | min_out (u64) | slippage_tolerance_bps (u16) | nonce (32 bytes)

The layout has no padding, so any reordering changes every hash. The nonce
is the only element separating two otherwise identical trades and is drawn
from a cryptographic source.
"""

import hashlib
import hmac
import struct
from dataclasses import dataclass, field
from typing import Optional, Union

from .constants import (
    HASH_SIZE_BYTES,
    INTENT_SIZE_BYTES,
    NONCE_SIZE_BYTES,
    U16_MAX,
    U64_MAX,
)
from .exceptions import ValidationError
from .interfaces import NonceSource, get_nonce_source
from .utils import hash_to_hex

INTENT_STRUCT = struct.Struct("<QQH32s")


@dataclass(frozen=True)
class SwapIntent:
    """Hidden parameters of a protected swap."""

    amount_in: int
    min_out: int
    slippage_tolerance_bps: int
    nonce: bytes = field(repr=False)

    def __post_init__(self):
        for name, upper in (
            ("amount_in", U64_MAX),
            ("min_out", U64_MAX),
            ("slippage_tolerance_bps", U16_MAX),
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= upper:
                raise ValidationError(
                    f"{name} out of range: {value!r}",
                    details={"field": name, "value": value},
                )
        if not isinstance(self.nonce, (bytes, bytearray)) or len(self.nonce) != NONCE_SIZE_BYTES:
            raise ValidationError(
                f"nonce must be exactly {NONCE_SIZE_BYTES} bytes",
                details={"field": "nonce"},
            )

    @classmethod
    def create(
        cls,
        amount_in: int,
        min_out: int,
        slippage_tolerance_bps: int,
        nonce_source: Optional[NonceSource] = None,
    ) -> "SwapIntent":
        """Build an intent with a fresh nonce."""
        return cls(
            amount_in=amount_in,
            min_out=min_out,
            slippage_tolerance_bps=slippage_tolerance_bps,
            nonce=generate_nonce(nonce_source),
        )

    def serialize(self) -> bytes:
        return INTENT_STRUCT.pack(
            self.amount_in,
            self.min_out,
            self.slippage_tolerance_bps,
            bytes(self.nonce),
        )

    @classmethod
    def deserialize(cls, data: bytes) -> "SwapIntent":
        """
        Parse the fixed 50-byte layout.

        Raises:
            ValidationError: If ``data`` is not exactly 50 bytes long
        """
        if len(data) != INTENT_SIZE_BYTES:
            raise ValidationError(
                f"serialized intent must be {INTENT_SIZE_BYTES} bytes, got {len(data)}",
                details={"length": len(data)},
            )
        amount_in, min_out, slippage, nonce = INTENT_STRUCT.unpack(data)
        return cls(
            amount_in=amount_in,
            min_out=min_out,
            slippage_tolerance_bps=slippage,
            nonce=nonce,
        )


def generate_nonce(source: Optional[NonceSource] = None) -> bytes:
    """Draw a fresh 32-byte nonce from ``source`` or the configured default."""
    source = source or get_nonce_source()
    nonce = source.token_bytes(NONCE_SIZE_BYTES)
    if len(nonce) != NONCE_SIZE_BYTES:
        raise ValidationError(
            f"nonce source returned {len(nonce)} bytes, expected {NONCE_SIZE_BYTES}"
        )
    return nonce


def hash_intent(intent: SwapIntent) -> bytes:
    """SHA-256 of the serialized intent."""
    return hashlib.sha256(intent.serialize()).digest()


def verify_intent(intent: SwapIntent, commitment_hash: bytes) -> bool:
    """Recompute the intent hash and compare it against a stored commitment."""
    if len(commitment_hash) != HASH_SIZE_BYTES:
        return False
    return hmac.compare_digest(hash_intent(intent), bytes(commitment_hash))


# Commitment lifecycle: NoCommitment -> Committed -> {Revealed | Cancelled}


@dataclass(frozen=True)
class NoCommitment:
    """No commitment has been made (or the last one was reset)."""


@dataclass(frozen=True)
class Committed:
    """A live commitment awaiting reveal."""

    owner: str
    commitment_hash: bytes
    intent: SwapIntent
    a_to_b: bool
    created_at: int

    @property
    def hash_hex(self) -> str:
        return hash_to_hex(self.commitment_hash)


@dataclass(frozen=True)
class Revealed:
    """The commitment was revealed and its swap settled."""

    owner: str
    commitment_hash: bytes
    revealed_at: int


@dataclass(frozen=True)
class Cancelled:
    """The commitment was abandoned before reveal."""

    owner: str
    commitment_hash: bytes
    cancelled_at: int


CommitmentState = Union[NoCommitment, Committed, Revealed, Cancelled]
