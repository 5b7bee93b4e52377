"""
Per-engine event vocabularies.

Each profile names the real events whose durations are summed, the groups
merged into synthetic events, and the "time to X" metrics with their anchor.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

# Names shared by every engine, in report order.
SYNTHETIC_NAMES: Tuple[str, ...] = (
    'Renderer', 'Parse', 'Script', 'Layout', 'Rasterise', 'FP', 'FCP', 'TTI',
)

ANCHOR_UNIQUE = 'unique'
ANCHOR_FIRST = 'first'


@dataclass(frozen=True)
class EngineProfile:
    """Event names and derivation rules for one browser engine."""
    key: str
    kind: str
    renderer_names: Tuple[str, ...]
    groups: Tuple[Tuple[str, Tuple[str, ...]], ...]
    metrics: Tuple[Tuple[str, str], ...]
    metric_anchor: str
    anchor_policy: str = ANCHOR_UNIQUE
    ignored_names: FrozenSet[str] = frozenset()
    instantaneous_names: FrozenSet[str] = frozenset()
    url_exempt_categories: FrozenSet[str] = frozenset()
    # Names only the HTML trace of a dual-trace run carries.
    html_only_names: FrozenSet[str] = frozenset()

    @property
    def metric_names(self) -> Tuple[str, ...]:
        return tuple(result_name for result_name, _ in self.metrics)


CHROMIUM = EngineProfile(
    key='chromium',
    kind='Chromium',
    # TODO: add rasterisation and compositing events once the trace categories for them are enabled.
    renderer_names=(
        'ParseHTML', 'EvaluateScript', 'FunctionCall', 'TimerFire',
        'UpdateLayoutTree', 'Layout', 'PrePaint', 'Paint', 'Layerize',
    ),
    groups=(
        ('Renderer', (
            'ParseHTML', 'EvaluateScript', 'FunctionCall', 'TimerFire',
            'UpdateLayoutTree', 'Layout', 'PrePaint', 'Paint', 'Layerize',
        )),
        ('Parse', ('ParseHTML',)),
        ('Script', ('EvaluateScript', 'FunctionCall', 'TimerFire')),
        ('Layout', ('UpdateLayoutTree', 'Layout', 'PrePaint', 'Paint')),
        ('Rasterise', ('Layerize',)),
    ),
    # Paint timing marks are timed from markAsMainFrame, not navigation start.
    metrics=(('FP', 'firstPaint'), ('FCP', 'firstContentfulPaint')),
    metric_anchor='markAsMainFrame',
    ignored_names=frozenset({
        'PaintTimingVisualizer::LayoutObjectPainted',
        'ResourceSendRequest',
        'ResourceReceivedData',
        'ResourceReceiveResponse',
    }),
)

SERVO = EngineProfile(
    key='servo',
    kind='Servo',
    renderer_names=('ScriptParseHTML', 'ScriptEvaluate', 'LayoutPerform', 'Compositing'),
    groups=(
        ('Renderer', ('ScriptParseHTML', 'ScriptEvaluate', 'LayoutPerform', 'Compositing')),
        ('Parse', ('ScriptParseHTML',)),
        ('Script', ('ScriptEvaluate',)),
        ('Layout', ('LayoutPerform',)),
        ('Rasterise', ('Compositing',)),
    ),
    metrics=(
        ('FP', 'TimeToFirstPaint'),
        ('FCP', 'TimeToFirstContentfulPaint'),
        ('TTI', 'TimeToInteractive'),
    ),
    metric_anchor='ScriptParseHTML',
    anchor_policy=ANCHOR_FIRST,
    instantaneous_names=frozenset({
        'TimeToFirstPaint', 'TimeToFirstContentfulPaint', 'TimeToInteractive',
    }),
    url_exempt_categories=frozenset({'Compositing', 'IpcReceiver'}),
    html_only_names=frozenset({
        'TimeToFirstPaint', 'TimeToFirstContentfulPaint', 'TimeToInteractive',
    }),
)

ENGINE_PROFILES: Dict[str, EngineProfile] = {
    CHROMIUM.key: CHROMIUM,
    SERVO.key: SERVO,
}


def get_profile(engine: str) -> EngineProfile:
    """
    Look up an engine profile by key.

    Raises:
        ValueError: If the engine is unknown
    """
    try:
        return ENGINE_PROFILES[engine]
    except KeyError:
        raise ValueError(
            f"Unknown engine '{engine}'. Must be one of: {list(ENGINE_PROFILES.keys())}"
        ) from None
