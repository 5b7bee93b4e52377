"""Decoders turning raw trace files into occurrences."""

from .trace_event_decoder import TraceEventDecoder
from .script_decoder import ScriptDecoder
from .track_event_decoder import TrackEventDecoder
from .manifest import Manifest, load_manifest

__all__ = ["TraceEventDecoder", "ScriptDecoder", "TrackEventDecoder", "Manifest", "load_manifest"]
