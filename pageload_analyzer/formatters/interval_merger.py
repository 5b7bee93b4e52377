"""
Interval merging for building synthetic events from overlapping real events.
"""
from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List

from ..core.types import Event

_START = 1
_END = -1


def merge_events(events: Iterable[Event], result_name: str) -> List[Event]:
    """
    Merge overlapping and touching events into maximal spans.

    Sweep over the start and end edges of every event, grouped by
    timestamp. A span opens when the number of active events rises from
    zero and closes when it falls back to zero. Instantaneous events open
    and close at the same instant, so they never produce a span of their
    own.

    Example:
        Input: [2s, 4s), [3s, 5s), [5s, 7s), [9s, 10s)
        Output: [2s, 7s), [9s, 10s)

    Args:
        events: Events of one group, in any order
        result_name: Name given to every merged event

    Returns:
        Merged events in chronological order. Each carries the union of the
        metadata of all input events.
    """
    edges: DefaultDict[int, int] = defaultdict(int)
    metadata: Dict = {}
    for event in sorted(events, key=Event.sort_key):
        edges[event.start] += _START
        edges[event.end] += _END
        metadata.update(event.metadata)

    result = []
    active_count = 0
    open_time = None
    for time in sorted(edges):
        new_active_count = active_count + edges[time]
        if active_count > 0 and new_active_count == 0:
            result.append(Event(
                name=result_name,
                start=open_time,
                duration=time - open_time,
                metadata=dict(metadata),
            ))
        elif active_count == 0 and new_active_count > 0:
            open_time = time
        active_count = new_active_count

    return result


def total_duration(events: Iterable[Event]) -> int:
    """Sum of the durations of `events`, treating instantaneous ones as zero."""
    return sum(e.duration for e in events if e.duration is not None)
