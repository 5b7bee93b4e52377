"""Formatting and merging helpers for events and summaries."""

from .interval_merger import merge_events, total_duration
from .time_formatter import decimal_places, format_seconds, scale_seconds
from .trace_exporter import export_combined_trace

__all__ = [
    "merge_events",
    "total_duration",
    "decimal_places",
    "format_seconds",
    "scale_seconds",
    "export_combined_trace",
]
