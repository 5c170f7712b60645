"""
Common utilities and helper functions for the simulation engine.

This module provides centralized helpers for logging, basis-point arithmetic,
unit conversion and JSON serialization of result aggregates.
"""

import json
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from .constants import BASE_UNITS_PER_TOKEN, BPS_DENOMINATOR


# Basis point utilities
def bps_of(amount: int, bps: int) -> int:
    """Floor of ``amount * bps / 10000`` in exact integer arithmetic."""
    return amount * bps // BPS_DENOMINATOR


def calculate_percentage(value: float, total: float) -> float:
    """Calculate percentage with zero-division protection."""
    if total == 0:
        return 0.0
    return (value / total) * 100


# Unit utilities
def base_units_to_tokens(amount: int) -> float:
    """Convert base units (lamports) to whole tokens for display."""
    return amount / BASE_UNITS_PER_TOKEN


# Hex utilities
def hash_to_hex(digest: bytes) -> str:
    """Lowercase hex rendering of a digest or nonce."""
    return bytes(digest).hex()


# JSON utilities
def to_serializable(obj: Any) -> Any:
    """
    Recursively convert dataclasses, enums and bytes into JSON-compatible values.

    Args:
        obj: Value to convert

    Returns:
        Structure made of dicts, lists, strings and numbers
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {k: to_serializable(v) for k, v in asdict(obj).items()}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (bytes, bytearray)):
        return hash_to_hex(obj)
    if isinstance(obj, dict):
        return {str(k): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_serializable(v) for v in obj]
    return obj


def safe_json_dump(data: Any, **kwargs) -> str:
    """
    Safely serialize data to JSON with sensible defaults.

    Args:
        data: Data to serialize
        **kwargs: Additional arguments to json.dumps

    Returns:
        JSON string
    """
    defaults = {"ensure_ascii": False, "indent": 2, "default": _json_default_handler}
    defaults.update(kwargs)
    return json.dumps(to_serializable(data), **defaults)


def _json_default_handler(obj: Any) -> Any:
    """Default JSON serialization handler for custom types."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    elif hasattr(obj, "__dict__"):
        return obj.__dict__
    else:
        return str(obj)


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    extra: Optional[Dict[str, Any]] = None,
    minimal: bool = False,
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a logger with its own console handler and optional context fields.

    The first call for ``name`` installs the handler and stops propagation to
    the root, so worker processes that inherit root handlers do not print
    twice. Fields in ``extra`` are rendered as ``key=value`` ahead of the
    message; later calls with the same keys and new values share the handler.

    Args:
        name: Logger name (typically __name__)
        level: Logging level, applied only if the logger has none yet
        extra: Context fields attached to every message
        minimal: If True, use simplified format (time + message only)

    Returns:
        The logger, wrapped in a LoggerAdapter when ``extra`` is given
    """
    logger = logging.getLogger(name)
    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        if minimal:
            format_str = "%(asctime)s | %(message)s"
        else:
            format_str = "%(asctime)s | %(levelname)-7s | %(name)s:%(lineno)d | %(message)s"
        if extra:
            context = " | ".join(f"{key}=%(ctx_{key})s" for key in extra)
            format_str = format_str.replace(" | %(message)s", f" | {context} | %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(format_str, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
        logger.propagate = False

    if extra:
        return logging.LoggerAdapter(logger, {f"ctx_{k}": v for k, v in extra.items()})
    return logger
