"""
Type definitions for page-load trace analysis.

All durations and timestamps are integer nanoseconds.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from .errors import MetricError

NANOS_PER_MICRO = 1_000
NANOS_PER_MILLI = 1_000_000
NANOS_PER_SECOND = 1_000_000_000

# Durations are stored as unsigned 64-bit nanosecond counts.
MAX_DURATION_NS = 2 ** 64 - 1


def checked_duration(nanos: int) -> int:
    """
    Validate that a nanosecond count is representable as a duration.

    Raises:
        MetricError: If the value is negative or overflows 64 bits
    """
    if nanos < 0:
        raise MetricError(f"Negative duration: {nanos}ns")
    if nanos > MAX_DURATION_NS:
        raise MetricError(f"Duration overflows 64 bits: {nanos}ns")
    return nanos


def from_micros(micros: float) -> int:
    """Convert microseconds (int or float) to integer nanoseconds."""
    return checked_duration(int(round(micros * NANOS_PER_MICRO)))


def from_millis(millis: float) -> int:
    return checked_duration(int(round(millis * NANOS_PER_MILLI)))


def from_secs(secs: float) -> int:
    return checked_duration(int(round(secs * NANOS_PER_SECOND)))


def as_micros(nanos: int) -> int:
    return nanos // NANOS_PER_MICRO


def as_secs_f64(nanos: int) -> float:
    return nanos / NANOS_PER_SECOND


@dataclass
class Occurrence:
    """
    A raw timed record produced by a decoder, before scoping and re-basing.

    `start` and `end` are on the trace's own clock. `end` is None for
    instantaneous records.
    """
    name: str
    category: str
    start: int
    end: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    navigation_id: Optional[str] = None
    frame_id: Optional[str] = None
    url: Optional[str] = None
    phase: Optional[str] = None

    @property
    def span(self) -> Optional[int]:
        """Length of the record, or None if it has no end."""
        if self.end is None:
            return None
        return self.end - self.start

    def sort_key(self):
        # Instantaneous records sort before spans starting at the same time.
        span = self.span
        return (self.start, -1 if span is None else span)


def sort_occurrences(occurrences: Sequence[Occurrence]) -> List[Occurrence]:
    """Return occurrences in chronological order (start, then length)."""
    return sorted(occurrences, key=Occurrence.sort_key)


@dataclass(frozen=True)
class Event:
    """
    Canonical event relative to the start of its sample.

    `duration` is None for instantaneous events.
    """
    name: str
    start: int
    duration: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def end(self) -> int:
        if self.duration is None:
            return self.start
        return self.start + self.duration

    @property
    def is_instantaneous(self) -> bool:
        return self.duration is None

    def sort_key(self):
        return (self.start, -1 if self.duration is None else self.duration)


class AnalysisKey(NamedTuple):
    """Identifies one group of samples sharing a site, engine and CPU config."""
    cpu_config: str
    site: str
    engine: str

    def relative_dir(self) -> str:
        return os.path.join(self.cpu_config, self.site, self.engine)


class AnalysisConfig:
    """Configuration for page-load trace analysis."""

    def __init__(
        self,
        num_workers: Optional[int] = None,
        traceconv_command: Optional[Sequence[str]] = None,
        url_agnostic_categories: Optional[Sequence[str]] = None
    ):
        """
        Initialize analysis configuration.

        Args:
            num_workers: Worker processes used to decode samples and convert
                         binary traces. Default: os.cpu_count()

            traceconv_command: Program and leading arguments used to convert
                               binary traces to JSON. The conversion appends
                               "json <input> <output>".
                               Default: ["traceconv"]

            url_agnostic_categories: Categories of navigation-scoped traces that
                                     have no per-page identity and are always
                                     kept by the scope resolver.
                                     Default: none
        """
        self.num_workers = num_workers or os.cpu_count() or 1
        self.traceconv_command = list(traceconv_command or ["traceconv"])
        self.url_agnostic_categories = frozenset(url_agnostic_categories or ())

    def to_dict(self) -> Dict[str, Any]:
        """Plain form for passing to worker processes."""
        return {
            'num_workers': self.num_workers,
            'traceconv_command': list(self.traceconv_command),
            'url_agnostic_categories': sorted(self.url_agnostic_categories),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        return cls(
            num_workers=data.get('num_workers'),
            traceconv_command=data.get('traceconv_command'),
            url_agnostic_categories=data.get('url_agnostic_categories'),
        )
