"""
Metric extraction: summed durations and "time since anchor" metrics.
"""

import logging
from typing import List, Optional, Sequence

from ..core.errors import AmbiguityError, MetricError
from ..core.types import Event, checked_duration

logger = logging.getLogger(__name__)


def events_named(events: Sequence[Event], name: str) -> List[Event]:
    return [e for e in events if e.name == name]


def first_event(events: Sequence[Event], name: str) -> Event:
    """
    Return the chronologically first event named `name`.

    Raises:
        AmbiguityError: If there is no such event
    """
    matching = events_named(events, name)
    if not matching:
        raise AmbiguityError(f"No events with name {name}")
    return min(matching, key=Event.sort_key)


def sum_duration(events: Sequence[Event], name: str) -> int:
    """
    Sum the durations of all events named `name`.

    Returns:
        Total in nanoseconds, 0 if there are no such events

    Raises:
        MetricError: If the total overflows
    """
    total = sum(e.duration for e in events_named(events, name) if e.duration is not None)
    return checked_duration(total)


def relative_metric(
    events: Sequence[Event],
    result_name: str,
    anchor: Event,
    target_name: str,
    require_instantaneous: bool = False
) -> Optional[Event]:
    """
    Measure the time from `anchor` to the single event named `target_name`.

    Args:
        events: Events of one sample
        result_name: Name of the returned event
        anchor: Event the metric is timed from
        target_name: Name of the event the metric is timed to
        require_instantaneous: If True, the target must have no duration

    Returns:
        Event spanning [anchor.start, target.start), or None if the target
        does not occur

    Raises:
        AmbiguityError: If the target occurs more than once
        MetricError: If the target precedes the anchor or is not instantaneous
    """
    targets = events_named(events, target_name)
    if not targets:
        return None
    if len(targets) > 1:
        raise AmbiguityError(
            f"Expected exactly one event with name {target_name}, found {len(targets)}"
        )
    target = targets[0]

    if require_instantaneous and target.duration:
        raise MetricError(f"Event {target_name} is not instantaneous")
    if target.start < anchor.start:
        raise MetricError(f"Event {target_name} is earlier than {anchor.name}")

    return Event(
        name=result_name,
        start=anchor.start,
        duration=checked_duration(target.start - anchor.start),
    )


def unique_relative_metric(
    events: Sequence[Event],
    result_name: str,
    anchor_name: str,
    target_name: str,
    require_instantaneous: bool = False
) -> Optional[Event]:
    """
    Like relative_metric, with the anchor being the only event named `anchor_name`.

    Raises:
        AmbiguityError: If the anchor does not occur exactly once, or the
                        target occurs more than once
    """
    anchors = events_named(events, anchor_name)
    if len(anchors) != 1:
        raise AmbiguityError(
            f"Expected exactly one event with name {anchor_name}, found {len(anchors)}"
        )
    return relative_metric(events, result_name, anchors[0], target_name, require_instantaneous)
