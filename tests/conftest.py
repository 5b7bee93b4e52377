"""
Pytest configuration and shared fixtures for page-load analyzer tests.
"""
import json
import pytest

from perfetto.protos.perfetto.trace.perfetto_trace_pb2 import Trace, TracePacket, TrackEvent

PAGE_URL = "https://example.org/"
OTHER_URL = "https://ads.example.net/frame.html"


def chrome_trace_events(first_parse_us=10000, second_parse_us=5000):
    """
    Chrome trace events of one page load of PAGE_URL, plus a global
    duplicate of some milestones, one event of another frame, an ignored
    event and a metadata record. Times in microseconds.
    """
    nav = {"navigationId": "NAV1"}
    return [
        {"name": "process_name", "ph": "M", "pid": 1, "tid": 0, "ts": 0,
         "args": {"name": "Renderer"}},
        # Global copies, emitted before the per-navigation ones.
        {"name": "navigationStart", "cat": "blink.user_timing", "ph": "R", "ts": 500,
         "pid": 1, "tid": 1, "args": {"data": dict(nav)}},
        {"name": "ResourceSendRequest", "cat": "devtools.timeline", "ph": "I", "ts": 900,
         "pid": 1, "tid": 1, "args": {"data": {"frame": "F1"}}},
        {"name": "navigationStart", "cat": "blink.user_timing", "ph": "R", "ts": 1000,
         "pid": 1, "tid": 1,
         "args": {"data": {"navigationId": "NAV1", "documentLoaderURL": PAGE_URL}, "frame": "F1"}},
        {"name": "fetchStart", "cat": "blink.user_timing", "ph": "R", "ts": 1100,
         "pid": 1, "tid": 1, "args": {"data": dict(nav)}},
        {"name": "responseEnd", "cat": "blink.user_timing", "ph": "R", "ts": 1150,
         "pid": 1, "tid": 1, "args": {"data": dict(nav)}},
        {"name": "markAsMainFrame", "cat": "loading", "ph": "I", "ts": 1200,
         "pid": 1, "tid": 1, "args": {"frame": "F1"}},
        {"name": "responseEnd", "cat": "blink.user_timing", "ph": "R", "ts": 1300,
         "pid": 1, "tid": 1, "args": {"data": dict(nav)}},
        {"name": "ParseHTML", "cat": "devtools.timeline", "ph": "X", "ts": 1400,
         "dur": first_parse_us, "pid": 1, "tid": 1,
         "args": {"beginData": {"frame": "F1", "url": PAGE_URL}}},
        {"name": "ParseHTML", "cat": "devtools.timeline", "ph": "X", "ts": 1500, "dur": 999,
         "pid": 2, "tid": 1,
         "args": {"beginData": {"frame": "F2", "url": OTHER_URL}}},
        {"name": "ParseHTML", "cat": "devtools.timeline", "ph": "X",
         "ts": 1400 + first_parse_us + 600, "dur": second_parse_us, "pid": 1, "tid": 1,
         "args": {"beginData": {"frame": "F1", "url": PAGE_URL}}},
        {"name": "firstPaint", "cat": "loading", "ph": "R", "ts": 30000,
         "pid": 1, "tid": 1, "args": {"frame": "F1"}},
        {"name": "firstContentfulPaint", "cat": "loading", "ph": "R", "ts": 30500,
         "pid": 1, "tid": 1, "args": {"frame": "F1"}},
        {"name": "loadEventEnd", "cat": "blink.user_timing", "ph": "R", "ts": 40000,
         "pid": 1, "tid": 1, "args": {"data": dict(nav)}},
    ]


def write_chrome_trace(path, events):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump({"traceEvents": events, "metadata": {"source": "tests"}}, f)
    return str(path)


def servo_entries(parse_ns=2000):
    """Script-embedded trace entries of one Servo page load. Times in nanoseconds."""
    return [
        {"category": "ScriptParseHTML", "startTime": 1000, "endTime": 1000 + parse_ns,
         "metadata": {"url": PAGE_URL}},
        {"category": "ScriptEvaluate", "startTime": 1500, "endTime": 2000,
         "metadata": {"url": OTHER_URL}},
        {"category": "Compositing", "startTime": 2500, "endTime": 4000},
        {"category": "LayoutPerform", "startTime": 3500, "endTime": 4500,
         "metadata": {"url": PAGE_URL}},
        {"category": "TimeToFirstPaint", "startTime": 5000, "endTime": 5000,
         "metadata": {"url": PAGE_URL}},
        {"category": "TimeToFirstContentfulPaint", "startTime": 5500, "endTime": 5500,
         "metadata": {"url": PAGE_URL}},
    ]


def servo_html(entries, truncated=False):
    body = "".join(f"{json.dumps(entry)},\n" for entry in entries)
    html = (
        "<!DOCTYPE html>\n<html><head><title>Servo trace</title></head><body>\n"
        f"<script>window.TRACES = [\n{body}"
    )
    if truncated:
        return html
    return html + "];</script>\n</body></html>\n"


def perfetto_trace_bytes(url=PAGE_URL, parse_start=1000, parse_end=3000):
    """
    A Perfetto trace with an interned ScriptParseHTML slice carrying a url
    annotation, and a nested pair of slices on a second track.
    """
    trace = Trace()

    packet = trace.packet.add()
    packet.trusted_packet_sequence_id = 1
    packet.sequence_flags = TracePacket.SEQ_INCREMENTAL_STATE_CLEARED
    packet.interned_data.event_names.add(iid=1, name="ScriptParseHTML")
    packet.interned_data.debug_annotation_names.add(iid=1, name="url")

    packet = trace.packet.add()
    packet.trusted_packet_sequence_id = 1
    packet.timestamp = parse_start
    packet.track_event.type = TrackEvent.TYPE_SLICE_BEGIN
    packet.track_event.track_uuid = 10
    packet.track_event.name_iid = 1
    annotation = packet.track_event.debug_annotations.add()
    annotation.name_iid = 1
    annotation.string_value = url

    for timestamp, event_type, name in (
        (2500, TrackEvent.TYPE_SLICE_BEGIN, "Compositing"),
        (2600, TrackEvent.TYPE_SLICE_BEGIN, "IpcReceiver"),
        (2700, TrackEvent.TYPE_SLICE_END, None),
        (4000, TrackEvent.TYPE_SLICE_END, "Compositing"),
    ):
        packet = trace.packet.add()
        packet.trusted_packet_sequence_id = 2
        packet.timestamp = timestamp
        packet.track_event.type = event_type
        packet.track_event.track_uuid = 11
        if name is not None:
            packet.track_event.name = name
            packet.track_event.categories.append(name)

    packet = trace.packet.add()
    packet.trusted_packet_sequence_id = 1
    packet.timestamp = parse_end
    packet.track_event.type = TrackEvent.TYPE_SLICE_END
    packet.track_event.track_uuid = 10

    return trace.SerializeToString()


@pytest.fixture
def chrome_trace_file(tmp_path):
    """One Chromium sample with ParseHTML slices of 10000µs and 5000µs."""
    return write_chrome_trace(tmp_path / "chrome1.json", chrome_trace_events())


@pytest.fixture
def chrome_sample_dir(tmp_path):
    """A Chromium sample directory with two samples (15ms and 25ms of ParseHTML)."""
    sample_dir = tmp_path / "cpu0" / "example" / "chromium"
    sample_dir.mkdir(parents=True)
    write_chrome_trace(sample_dir / "chrome1.json", chrome_trace_events(10000, 5000))
    write_chrome_trace(sample_dir / "chrome2.json", chrome_trace_events(20000, 5000))
    return sample_dir


@pytest.fixture
def servo_html_file(tmp_path):
    path = tmp_path / "servo1.html"
    path.write_text(servo_html(servo_entries()), encoding='utf-8')
    return str(path)


@pytest.fixture
def perfetto_file(tmp_path):
    path = tmp_path / "servo1.pftrace"
    path.write_bytes(perfetto_trace_bytes())
    return str(path)


@pytest.fixture
def servo_manifest_file(tmp_path, servo_html_file, perfetto_file):
    path = tmp_path / "manifest1.json"
    path.write_text(json.dumps({"html": "servo1.html", "perfetto": "servo1.pftrace"}),
                    encoding='utf-8')
    return str(path)
