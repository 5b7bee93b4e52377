"""
Decoder for Perfetto protobuf traces made of track events.

Slices are reconstructed by matching SLICE_BEGIN and SLICE_END packets on
each track, like parentheses. Each track has an explicit stack so that
deeply nested traces never recurse.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from google.protobuf.message import DecodeError as ProtobufDecodeError
from perfetto.protos.perfetto.trace.perfetto_trace_pb2 import Trace, TracePacket, TrackEvent

from ..core.errors import DecodeError
from ..core.types import Occurrence, sort_occurrences

logger = logging.getLogger(__name__)

# Track event timestamps default to the boot-time clock.
BUILTIN_CLOCK_BOOTTIME = 6

ANNOTATION_VALUE_FIELDS = (
    'bool_value',
    'uint_value',
    'int_value',
    'double_value',
    'string_value',
    'pointer_value',
    'legacy_json_value',
)


class _SequenceState:
    """Interning tables and packet defaults of one packet sequence."""

    def __init__(self):
        self.event_names: Dict[int, str] = {}
        self.annotation_names: Dict[int, str] = {}
        self.clock_id: Optional[int] = None
        self.track_uuid: Optional[int] = None


class TrackEventDecoder:
    """Decodes Perfetto track-event traces into occurrences."""

    def __init__(self):
        self._sequences: Dict[int, _SequenceState] = defaultdict(_SequenceState)
        # track uuid -> stack of (begin timestamp, name, categories, metadata)
        self._open_slices: Dict[int, List[Tuple[int, str, str, Dict[str, Any]]]] = defaultdict(list)

    @staticmethod
    def decode_file(file_path: str) -> List[Occurrence]:
        logger.info(f"Decoding {file_path}...")
        with open(file_path, 'rb') as f:
            return TrackEventDecoder().decode(f.read())

    def decode(self, data: bytes) -> List[Occurrence]:
        """
        Decode a serialized Perfetto trace.

        Args:
            data: Raw bytes of a `Trace` protobuf message

        Returns:
            One occurrence per completed slice, sorted by start, then length

        Raises:
            DecodeError: On malformed protobuf, unbalanced or mismatched
                         slices, or timestamps on an unsupported clock
        """
        trace = Trace()
        try:
            trace.ParseFromString(data)
        except ProtobufDecodeError as e:
            raise DecodeError(f"Malformed protobuf trace: {e}") from e

        occurrences = []
        for packet in trace.packet:
            occurrence = self._process_packet(packet)
            if occurrence is not None:
                occurrences.append(occurrence)

        unclosed = sum(len(stack) for stack in self._open_slices.values())
        if unclosed:
            logger.debug(f"Dropping {unclosed} slices still open at end of trace")

        logger.debug(f"Read {len(trace.packet)} packets, {len(occurrences)} slices")
        return sort_occurrences(occurrences)

    def _process_packet(self, packet) -> Optional[Occurrence]:
        sequence_id = packet.trusted_packet_sequence_id
        if packet.sequence_flags & TracePacket.SEQ_INCREMENTAL_STATE_CLEARED:
            self._sequences[sequence_id] = _SequenceState()
        state = self._sequences[sequence_id]

        if packet.HasField('trace_packet_defaults'):
            defaults = packet.trace_packet_defaults
            if defaults.HasField('timestamp_clock_id'):
                state.clock_id = defaults.timestamp_clock_id
            if defaults.track_event_defaults.HasField('track_uuid'):
                state.track_uuid = defaults.track_event_defaults.track_uuid

        if packet.HasField('interned_data'):
            for entry in packet.interned_data.event_names:
                state.event_names[entry.iid] = entry.name
            for entry in packet.interned_data.debug_annotation_names:
                state.annotation_names[entry.iid] = entry.name

        if not packet.HasField('track_event'):
            return None

        clock_id = packet.timestamp_clock_id if packet.HasField('timestamp_clock_id') else state.clock_id
        if clock_id is not None and clock_id != BUILTIN_CLOCK_BOOTTIME:
            raise DecodeError(f"Unsupported timestamp clock id {clock_id}")

        event = packet.track_event
        if event.HasField('track_uuid'):
            track = event.track_uuid
        else:
            track = state.track_uuid or 0

        if event.type == TrackEvent.TYPE_SLICE_BEGIN:
            name = self._event_name(event, state)
            if name is None:
                raise DecodeError(f"Slice begin on track {track} has no name")
            category = event.categories[0] if event.categories else name
            metadata = self._annotations(event, state)
            self._open_slices[track].append((packet.timestamp, name, category, metadata))
            return None

        if event.type == TrackEvent.TYPE_SLICE_END:
            stack = self._open_slices[track]
            if not stack:
                raise DecodeError(f"Slice end on track {track} with no open slice")
            start, name, category, metadata = stack.pop()
            end_name = self._event_name(event, state)
            if end_name is not None and end_name != name:
                raise DecodeError(
                    f"Slice end {end_name!r} on track {track} does not match begin {name!r}"
                )
            if packet.timestamp < start:
                raise DecodeError(f"Slice {name} on track {track} ends before it starts")
            url = metadata.get('url')
            return Occurrence(
                name=name,
                category=category,
                start=start,
                end=packet.timestamp,
                metadata=metadata,
                url=url if isinstance(url, str) else None,
            )

        return None

    @staticmethod
    def _event_name(event, state: _SequenceState) -> Optional[str]:
        if event.HasField('name'):
            return event.name
        if event.HasField('name_iid'):
            try:
                return state.event_names[event.name_iid]
            except KeyError:
                raise DecodeError(f"Unknown interned event name {event.name_iid}") from None
        return None

    @staticmethod
    def _annotations(event, state: _SequenceState) -> Dict[str, Any]:
        """Convert debug annotations with primitive values to a plain dict."""
        metadata = {}
        for annotation in event.debug_annotations:
            if annotation.HasField('name'):
                name = annotation.name
            elif annotation.HasField('name_iid'):
                name = state.annotation_names.get(annotation.name_iid)
            else:
                name = None
            if name is None:
                continue
            for value_field in ANNOTATION_VALUE_FIELDS:
                if annotation.HasField(value_field):
                    metadata[name] = getattr(annotation, value_field)
                    break
        return metadata
