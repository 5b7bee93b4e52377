"""
Event normalizer: scoped occurrences -> canonical events on a shared zero origin.
"""

import logging
from typing import AbstractSet, List, Optional, Sequence

from ..core.errors import AlignmentError, DecodeError, MetricError
from ..core.types import Event, Occurrence, checked_duration

logger = logging.getLogger(__name__)


class EventNormalizer:
    """Converts occurrences into events re-based to the start of the sample."""

    def __init__(
        self,
        instantaneous_names: AbstractSet[str] = frozenset(),
        ignored_names: AbstractSet[str] = frozenset()
    ):
        """
        Args:
            instantaneous_names: Names that must never carry a nonzero span
            ignored_names: Names dropped from the output; they still count
                           towards the origin
        """
        self.instantaneous_names = instantaneous_names
        self.ignored_names = ignored_names

    def canonical_duration(self, occurrence: Occurrence) -> Optional[int]:
        """
        Duration of an occurrence, or None if it is instantaneous.

        Raises:
            DecodeError: If a declared-instantaneous name has a nonzero span
        """
        span = occurrence.span
        if occurrence.name in self.instantaneous_names:
            if span:
                raise DecodeError(
                    f"{occurrence.name} at {occurrence.start} is not instantaneous (span {span}ns)"
                )
            return None
        return span

    def normalize(self, occurrences: Sequence[Occurrence]) -> List[Event]:
        """
        Build events whose starts are offsets from the earliest occurrence.

        Args:
            occurrences: Scoped occurrences of one sample

        Returns:
            Events sorted by start, then duration

        Raises:
            DecodeError: If there are no occurrences or a duration is invalid
        """
        if not occurrences:
            raise DecodeError("No events")

        origin = min(o.start for o in occurrences)
        events = []
        for occurrence in occurrences:
            if occurrence.name in self.ignored_names:
                continue
            duration = self.canonical_duration(occurrence)
            try:
                start = checked_duration(occurrence.start - origin)
                if duration is not None:
                    duration = checked_duration(duration)
            except MetricError as e:
                raise DecodeError(f"{occurrence.name}: {e}") from e

            if duration is None:
                logger.debug(f"{start} {occurrence.phase or ''} {occurrence.name}")
            else:
                logger.debug(f"{start} +{duration} {occurrence.phase or ''} {occurrence.name}")

            events.append(Event(
                name=occurrence.name,
                start=start,
                duration=duration,
                metadata=dict(occurrence.metadata),
            ))

        events.sort(key=Event.sort_key)
        return events

    @staticmethod
    def reconcile(
        html_events: Sequence[Event],
        binary_events: Sequence[Event],
        html_only_names: AbstractSet[str]
    ) -> List[Event]:
        """
        Combine two independently re-based traces of the same run.

        All binary-trace events are kept; from the HTML trace only the
        events named in `html_only_names` are taken.

        Raises:
            AlignmentError: If either trace is empty or the traces do not
                            start with an event of the same name
        """
        if not html_events or not binary_events:
            raise AlignmentError("Cannot align an empty trace")
        html_first = min(html_events, key=Event.sort_key)
        binary_first = min(binary_events, key=Event.sort_key)
        if html_first.name != binary_first.name:
            raise AlignmentError(
                f"Traces start with different events: {html_first.name!r} (HTML) "
                f"vs {binary_first.name!r} (Perfetto)"
            )

        combined = list(binary_events)
        combined.extend(e for e in html_events if e.name in html_only_names)
        combined.sort(key=Event.sort_key)
        return combined
