"""
Sample construction: one trace file (or manifest) -> one immutable Sample.
"""

import logging
from typing import Dict, List, Sequence

from ..core.errors import DecodeError
from ..core.profiles import ANCHOR_FIRST, EngineProfile, get_profile
from ..core.types import AnalysisConfig, Event
from ..decoders import ScriptDecoder, TraceEventDecoder, TrackEventDecoder, load_manifest
from ..filters import ScopeResolver
from ..formatters import merge_events
from .metrics import first_event, relative_metric, sum_duration, unique_relative_metric
from .normalizer import EventNormalizer

logger = logging.getLogger(__name__)


class Sample:
    """All events and summed durations of one page-load run."""

    def __init__(self, path: str, engine: str, events: Sequence[Event], durations: Dict[str, int]):
        self._path = path
        self._engine = engine
        self._events = tuple(events)
        self._durations = dict(durations)

    @property
    def path(self) -> str:
        return self._path

    @property
    def engine(self) -> str:
        return self._engine

    @property
    def profile(self) -> EngineProfile:
        return get_profile(self._engine)

    @property
    def events(self) -> Sequence[Event]:
        return self._events

    @property
    def durations(self) -> Dict[str, int]:
        return dict(self._durations)

    def real_events(self) -> List[Event]:
        return list(self._events)

    def synthetic_events(self) -> List[Event]:
        """
        Derive merged group events and "time to X" metrics.

        Absent metric targets are left out.

        Raises:
            AmbiguityError: If a metric anchor or target is not unique
            MetricError: If a metric target precedes its anchor
        """
        profile = self.profile
        result = []
        for merged_name, names in profile.groups:
            group = [e for e in self._events if e.name in names]
            result.extend(merge_events(group, merged_name))

        if profile.anchor_policy == ANCHOR_FIRST:
            anchor = first_event(self._events, profile.metric_anchor)
            for result_name, target_name in profile.metrics:
                event = relative_metric(
                    self._events, result_name, anchor, target_name, require_instantaneous=True
                )
                if event is not None:
                    result.append(event)
        else:
            for result_name, target_name in profile.metrics:
                event = unique_relative_metric(
                    self._events, result_name, profile.metric_anchor, target_name
                )
                if event is not None:
                    result.append(event)

        return result

    def all_events(self) -> List[Event]:
        """Real and synthetic events together, in chronological order."""
        return sorted(self.real_events() + self.synthetic_events(), key=Event.sort_key)

    def __repr__(self) -> str:
        return f"Sample(path={self._path!r}, engine={self._engine!r}, events={len(self._events)})"


class SampleBuilder:
    """Builds samples of one engine for one target URL."""

    def __init__(self, profile: EngineProfile, config: AnalysisConfig):
        self.profile = profile
        self.config = config
        self.scope_resolver = ScopeResolver(config)
        self.normalizer = EventNormalizer(
            instantaneous_names=profile.instantaneous_names,
            ignored_names=profile.ignored_names,
        )

    def build(self, path: str, url: str) -> Sample:
        """
        Decode, scope and normalize one sample file.

        Chromium samples are JSON traces. Servo samples are HTML traces,
        Perfetto traces, or JSON manifests pairing one of each.

        Raises:
            AnalysisError: If the sample cannot be analysed
        """
        events = self.build_events(path, url)
        durations = {name: sum_duration(events, name) for name in self.profile.renderer_names}
        for name, duration in durations.items():
            logger.debug(f"{name}: {duration}ns")
        return Sample(path=path, engine=self.profile.key, events=events, durations=durations)

    def build_events(self, path: str, url: str) -> List[Event]:
        if self.profile.key == 'chromium':
            if path.endswith('.json'):
                return self.chromium_events(path, url)
        elif path.endswith('.html'):
            return self.servo_html_events(path, url)
        elif path.endswith('.pftrace'):
            return self.servo_perfetto_events(path, url)
        elif path.endswith('.json'):
            return self.servo_combined_events(path, url)
        raise DecodeError(f"Unsupported {self.profile.kind} sample file: {path}")

    def chromium_events(self, path: str, url: str) -> List[Event]:
        occurrences = TraceEventDecoder.decode_file(path)
        relevant = self.scope_resolver.resolve_by_navigation(occurrences, url)
        return self.normalizer.normalize(relevant)

    def servo_html_events(self, path: str, url: str) -> List[Event]:
        occurrences = ScriptDecoder.decode_file(path)
        relevant = self.scope_resolver.resolve_by_url(
            occurrences, url, self.profile.url_exempt_categories
        )
        return self.normalizer.normalize(relevant)

    def servo_perfetto_events(self, path: str, url: str) -> List[Event]:
        occurrences = TrackEventDecoder.decode_file(path)
        relevant = self.scope_resolver.resolve_by_url(
            occurrences, url, self.profile.url_exempt_categories, require_match=False
        )
        return self.normalizer.normalize(relevant)

    def servo_combined_events(self, manifest_path: str, url: str) -> List[Event]:
        manifest = load_manifest(manifest_path)
        html_events = self.servo_html_events(manifest.html_path, url)
        binary_events = self.servo_perfetto_events(manifest.perfetto_path, url)
        return self.normalizer.reconcile(html_events, binary_events, self.profile.html_only_names)
