"""
Time formatting utilities for human-readable output.
"""
from typing import Tuple


def scale_seconds(secs: float) -> Tuple[float, str]:
    """
    Scale a time in seconds to the largest unit in which it is at least 1.

    Args:
        secs: Time in seconds

    Returns:
        Tuple of (scaled value, unit), unit one of "s", "ms", "μs", "ns"
    """
    if secs >= 1.0:
        return secs, "s"
    elif secs * 1000.0 >= 1.0:
        return secs * 1000.0, "ms"
    elif secs * 1000000.0 >= 1.0:
        return secs * 1000000.0, "μs"
    else:
        return secs * 1000000000.0, "ns"


def decimal_places(secs: float) -> int:
    """Decimal places that keep roughly four significant figures."""
    value, _ = scale_seconds(secs)
    if value >= 1000.0:
        return 0
    elif value >= 100.0:
        return 1
    elif value >= 10.0:
        return 2
    else:
        return 3


def format_seconds(secs: float) -> str:
    """
    Format time in seconds to a human-readable string.

    Args:
        secs: Time in seconds

    Returns:
        Formatted time string (e.g., "1.234s", "12.35ms", "123.5μs", "1234ns")
    """
    value, unit = scale_seconds(secs)
    return f"{value:.{decimal_places(secs)}f}{unit}"
