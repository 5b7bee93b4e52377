"""
Unit tests for pageload_analyzer.web.result_builder module.
"""
import json

from pageload_analyzer.core.profiles import CHROMIUM, SERVO
from pageload_analyzer.core.types import Event
from pageload_analyzer.processors.aggregator import Analysis
from pageload_analyzer.processors.sample_builder import Sample
from pageload_analyzer.web.result_builder import RawSeries, Summaries, build_summaries

MS = 1_000_000


def servo_sample(path, parse_ms, paint_ms=None, extra_events=()):
    events = [Event("ScriptParseHTML", 0, parse_ms * MS)]
    if paint_ms is not None:
        events.append(Event("TimeToFirstPaint", paint_ms * MS))
    events.extend(extra_events)
    durations = {
        "ScriptParseHTML": parse_ms * MS,
        "ScriptEvaluate": 0,
        "LayoutPerform": 0,
        "Compositing": 0,
    }
    return Sample(path, "servo", events, durations)


def entry_names(entries):
    return [e.name for e in entries]


class TestBuildSummaries:

    def test_real_and_synthetic_entries(self):
        analysis = Analysis([
            servo_sample("a.html", 15, paint_ms=40),
            servo_sample("b.html", 25, paint_ms=60),
        ])
        summaries = build_summaries(analysis, SERVO)

        assert entry_names(summaries.real_events) == [
            "Compositing", "LayoutPerform", "ScriptEvaluate", "ScriptParseHTML",
        ]
        parse = summaries.real_events[-1]
        assert parse.representative == "15.00ms"
        assert parse.full == "n=2, μ=20.00ms, s=7.071ms, min=15.00ms, max=25.00ms"

        # Merged groups are always defined; metrics only where the target exists.
        assert entry_names(summaries.synthetic_and_interpreted_events) == [
            "Renderer", "Parse", "Script", "Layout", "Rasterise", "FP",
        ]
        script = summaries.synthetic_and_interpreted_events[2]
        assert script.raw.mean == 0.0

    def test_single_sample_summaries_are_omitted(self):
        analysis = Analysis([servo_sample("a.html", 15), servo_sample("b.html", 25, paint_ms=40)])
        summaries = build_summaries(analysis, SERVO)

        assert "FP" not in entry_names(summaries.synthetic_and_interpreted_events)
        fp_series = [s for s in summaries.raw_series if s.name == "FP"]
        assert fp_series == [RawSeries(name="FP", kind="SyntheticOrInterpreted", values=[0.04])]

    def test_failing_synthetic_events_skip_the_sample(self):
        broken = servo_sample(
            "c.html", 35, paint_ms=40, extra_events=[Event("TimeToFirstPaint", 50 * MS)]
        )
        analysis = Analysis([
            servo_sample("a.html", 15, paint_ms=40),
            servo_sample("b.html", 25, paint_ms=60),
            broken,
        ])
        summaries = build_summaries(analysis, SERVO)

        renderer = summaries.synthetic_and_interpreted_events[0]
        assert renderer.name == "Renderer"
        assert renderer.raw.n == 2
        parse = [e for e in summaries.real_events if e.name == "ScriptParseHTML"][0]
        assert parse.raw.n == 3

    def test_raw_series_kinds(self):
        analysis = Analysis([servo_sample("a.html", 15), servo_sample("b.html", 25)])
        summaries = build_summaries(analysis, SERVO)

        kinds = {s.name: s.kind for s in summaries.raw_series}
        assert kinds["ScriptParseHTML"] == "Servo"
        assert kinds["Renderer"] == "SyntheticOrInterpreted"

    def test_empty_analysis(self):
        summaries = build_summaries(Analysis([]), CHROMIUM)
        assert summaries.real_events == []
        assert summaries.synthetic_and_interpreted_events == []


class TestSummaries:

    def test_json_round_trip_is_stable(self):
        analysis = Analysis([servo_sample("a.html", 15, 40), servo_sample("b.html", 25, 60)])
        summaries = build_summaries(analysis, SERVO)

        text = summaries.to_json()
        restored = Summaries.from_dict(json.loads(text))

        assert restored == summaries
        assert restored.to_json() == text
        assert list(json.loads(text)) == ["real_events", "synthetic_and_interpreted_events", "raw_series"]

    def test_text_layout(self):
        analysis = Analysis([servo_sample("a.html", 15), servo_sample("b.html", 25)])
        text = build_summaries(analysis, SERVO).to_text()
        lines = text.splitlines()

        assert lines[0] == ">>> Real events"
        assert "ScriptParseHTML: 15.00ms (n=2, μ=20.00ms, s=7.071ms, min=15.00ms, max=25.00ms)" in lines
        blank = lines.index("")
        assert lines[blank + 1] == ">>> Synthetic and interpreted events"
        assert lines[blank + 2].startswith("Renderer: 15.00ms")
