from __future__ import annotations

import logging
import re


logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024

UNIT_MULTIPLIERS = {
    "B": 1,
    "K": 1024,
    "M": 1024 ** 2,
    "G": 1024 ** 3,
    "T": 1024 ** 4,
    "P": 1024 ** 5,
    "E": 1024 ** 6,
}

HUMAN_SIZE_PATTERN = re.compile(r"^([0-9.]+)\s*([KMGTPEB])$", re.IGNORECASE)


def human_to_bytes(size: str) -> float:
    """Convert a df-style size token like '915G' or '6.2M' to bytes.

    Unparsable tokens yield 0.
    """
    match = HUMAN_SIZE_PATTERN.match(size.strip()) if size else None
    if not match:
        logger.debug("Invalid human-readable size: %r", size)
        return 0

    try:
        number = float(match.group(1))
    except ValueError:
        logger.debug("Invalid human-readable size: %r", size)
        return 0

    return number * UNIT_MULTIPLIERS[match.group(2).upper()]


def bytes_to_mb(value: float) -> int:
    return round(value / BYTES_PER_MB)


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def usage_percent(used: float, total: float) -> float:
    """used/total as a percentage clamped to [0, 100], one decimal; 0 when total is 0."""
    if total <= 0:
        return 0.0
    return round(clamp_percent(used / total * 100), 1)


def parse_percent(value: str) -> int:
    """Parse a 'NN%' token to an int clamped to [0, 100]."""
    try:
        parsed = int(value.replace("%", "").strip())
    except (ValueError, AttributeError):
        return 0
    return max(0, min(100, parsed))


def parse_float(value: str, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
