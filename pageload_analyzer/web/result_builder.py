"""
Result builder for summaries output.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import AggregationError, AnalysisError
from ..core.profiles import SYNTHETIC_NAMES, EngineProfile
from ..core.types import Event, as_secs_f64
from ..formatters import total_duration
from ..processors.aggregator import Analysis, Summary

logger = logging.getLogger(__name__)

KIND_SYNTHETIC_OR_INTERPRETED = 'SyntheticOrInterpreted'
EVENT_KINDS = (KIND_SYNTHETIC_OR_INTERPRETED, 'Servo', 'Chromium')


@dataclass
class SummaryEntry:
    """One summarized event name, with its raw statistics and formatted forms."""
    name: str
    raw: Summary
    full: str
    representative: str

    @classmethod
    def from_summary(cls, name: str, summary: Summary) -> 'SummaryEntry':
        return cls(
            name=name,
            raw=summary,
            full=summary.fmt_full(),
            representative=summary.fmt_representative(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'raw': self.raw.to_dict(),
            'full': self.full,
            'representative': self.representative,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SummaryEntry':
        return cls(
            name=data['name'],
            raw=Summary.from_dict(data['raw']),
            full=data['full'],
            representative=data['representative'],
        )


@dataclass
class RawSeries:
    """Per-sample values of one event name, in seconds."""
    name: str
    kind: str
    values: List[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'kind': self.kind,
            'values': list(self.values),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawSeries':
        kind = data['kind']
        if kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind '{kind}'. Must be one of: {list(EVENT_KINDS)}")
        return cls(name=data['name'], kind=kind, values=list(data['values']))


@dataclass
class Summaries:
    """Summaries of one analysis, as written to summaries.json and summaries.txt."""
    real_events: List[SummaryEntry]
    synthetic_and_interpreted_events: List[SummaryEntry]
    raw_series: List[RawSeries]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'real_events': [e.to_dict() for e in self.real_events],
            'synthetic_and_interpreted_events': [
                e.to_dict() for e in self.synthetic_and_interpreted_events
            ],
            'raw_series': [s.to_dict() for s in self.raw_series],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Summaries':
        return cls(
            real_events=[SummaryEntry.from_dict(e) for e in data['real_events']],
            synthetic_and_interpreted_events=[
                SummaryEntry.from_dict(e) for e in data['synthetic_and_interpreted_events']
            ],
            raw_series=[RawSeries.from_dict(s) for s in data.get('raw_series', [])],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_text(self) -> str:
        lines = [">>> Real events"]
        for entry in self.real_events:
            lines.append(f"{entry.name}: {entry.representative} ({entry.full})")
        lines.append("")
        lines.append(">>> Synthetic and interpreted events")
        for entry in self.synthetic_and_interpreted_events:
            lines.append(f"{entry.name}: {entry.representative} ({entry.full})")
        return "\n".join(lines) + "\n"


def _synthetic_events_by_sample(analysis: Analysis) -> Dict[int, Optional[List[Event]]]:
    result = {}
    for index, sample in enumerate(analysis.samples):
        try:
            result[index] = sample.synthetic_events()
        except AnalysisError as e:
            logger.warning(f"Failed to get synthetic events for {sample.path}: {e}")
            result[index] = None
    return result


def _summarize(
    analysis: Analysis,
    name: str,
    projection: Callable[[Any], Optional[float]]
) -> Optional[SummaryEntry]:
    try:
        return SummaryEntry.from_summary(name, analysis.summary(projection))
    except AggregationError as e:
        logger.debug(f"Omitting summary of {name}: {e}")
        return None


def build_summaries(analysis: Analysis, profile: EngineProfile) -> Summaries:
    """
    Summarize real and synthetic events across the samples of an analysis.

    Real events are the summed durations of each renderer event name.
    Synthetic events are the merged group spans, whose total is 0 when a
    sample has none, and the "time to X" metrics, which are left out for
    samples where the target never happened.

    Names without enough samples to summarize are omitted, never fatal.

    Args:
        analysis: Analysis of samples built with `profile`
        profile: Engine profile naming the groups and metrics

    Returns:
        Summaries with real events sorted by name and synthetic events in
        report order
    """
    real_events = []
    synthetic_events = []
    raw_series = []

    real_names = sorted({name for sample in analysis.samples for name in sample.durations})
    for name in real_names:
        def projection(sample, name=name):
            duration = sample.durations.get(name)
            return None if duration is None else as_secs_f64(duration)

        entry = _summarize(analysis, name, projection)
        if entry is not None:
            real_events.append(entry)
        values = analysis.values(projection)
        if values:
            raw_series.append(RawSeries(name=name, kind=profile.kind, values=values))

    # Index by position since samples need not be hashable.
    synthetic_by_sample = _synthetic_events_by_sample(analysis)
    index_of = {id(sample): index for index, sample in enumerate(analysis.samples)}
    group_names = {merged_name for merged_name, _ in profile.groups}

    for name in SYNTHETIC_NAMES:
        def projection(sample, name=name):
            events = synthetic_by_sample[index_of[id(sample)]]
            if events is None:
                return None
            matching = [e for e in events if e.name == name]
            if name not in group_names and not matching:
                return None
            return as_secs_f64(total_duration(matching))

        entry = _summarize(analysis, name, projection)
        if entry is not None:
            synthetic_events.append(entry)
        values = analysis.values(projection)
        if values:
            raw_series.append(RawSeries(
                name=name, kind=KIND_SYNTHETIC_OR_INTERPRETED, values=values
            ))

    logger.info(
        f"Summarized {len(real_events)} real and {len(synthetic_events)} synthetic events "
        f"over {len(analysis)} samples"
    )
    return Summaries(
        real_events=real_events,
        synthetic_and_interpreted_events=synthetic_events,
        raw_series=raw_series,
    )

