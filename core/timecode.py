"""
Time expression parsing.

Accepts ``SS``, ``MM:SS`` and ``HH:MM:SS``; no bounds checks on the minute or
second fields and no fractional seconds.
"""

from typing import Tuple

import structlog

from core.errors import InvalidInput, InvalidTimeFormat

logger = structlog.get_logger(__name__)

# Seconds per field, right-aligned: [.., hours, minutes, seconds]
_FIELD_WEIGHTS = (3600, 60, 1)


def parse_time(value: str) -> int:
    """Convert a colon-delimited time expression into whole seconds"""

    parts = value.split(':')
    if not 1 <= len(parts) <= 3:
        raise InvalidTimeFormat(f"Invalid time format: {value!r}")

    try:
        numbers = [int(part, 10) for part in parts]
    except ValueError:
        raise InvalidTimeFormat(f"Invalid time format: {value!r}")

    weights = _FIELD_WEIGHTS[-len(numbers):]
    return sum(n * w for n, w in zip(numbers, weights))


def parse_time_range(timestamps: str) -> Tuple[int, int]:
    """Parse a ``"<start>,<end>"`` pair into (start, end) seconds"""

    parts = timestamps.split(',')
    if len(parts) != 2:
        raise InvalidInput(
            f"Timestamps must be '<start>,<end>', got {timestamps!r}"
        )

    start, end = (parse_time(part.strip()) for part in parts)

    if start >= end:
        logger.warning("Time range is empty or reversed", start=start, end=end)

    return start, end
