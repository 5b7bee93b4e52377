"""
Chrome JSON trace decoding using streaming parser.

Format: {"traceEvents": [{"ts", "dur"?, "ph", "name", "cat", "pid", "tid", "args"}, ...]}
or a bare top-level array of the same entries. Timestamps are microseconds.
"""

import logging
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Sequence

import ijson

from ..core.errors import DecodeError, MetricError
from ..core.types import Occurrence, from_micros, sort_occurrences

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"

ArgLookup = Callable[[Dict[str, Any]], Optional[str]]


def nested_arg(*keys: str) -> ArgLookup:
    """Build a lookup that follows `keys` into an args map and expects a string."""
    def lookup(args: Dict[str, Any]) -> Optional[str]:
        value: Any = args
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value if isinstance(value, str) else None
    return lookup


# Lookup strategies, tried in order; the first that finds a value wins.
NAVIGATION_ID_LOOKUPS: Sequence[ArgLookup] = (
    nested_arg('data', 'navigationId'),
)

FRAME_LOOKUPS: Sequence[ArgLookup] = (
    nested_arg('data', 'frame'),        # most events, including Paint
    nested_arg('beginData', 'frame'),   # Layout
    nested_arg('frame'),
)

DOCUMENT_URL_LOOKUPS: Sequence[ArgLookup] = (
    nested_arg('data', 'documentLoaderURL'),
)


def first_match(lookups: Sequence[ArgLookup], args: Dict[str, Any]) -> Optional[str]:
    for lookup in lookups:
        value = lookup(args)
        if value is not None:
            return value
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TraceEventDecoder:
    """Decodes Chrome JSON traces into occurrences."""

    @staticmethod
    def decode_file(file_path: str) -> List[Occurrence]:
        """
        Decode a trace JSON file.

        Args:
            file_path: Path to the trace JSON file

        Returns:
            Occurrences sorted by start, then duration

        Raises:
            DecodeError: If the file is not a well-formed trace
        """
        logger.info(f"Decoding {file_path}...")
        with open(file_path, 'rb') as f:
            return TraceEventDecoder.decode(f)

    @staticmethod
    def decode(stream: BinaryIO) -> List[Occurrence]:
        """Decode a trace from a seekable binary stream."""
        prefix = TraceEventDecoder._events_prefix(stream)

        occurrences = []
        entry_count = 0
        try:
            for entry in ijson.items(stream, prefix, use_float=True):
                entry_count += 1
                occurrence = TraceEventDecoder._to_occurrence(entry)
                if occurrence is not None:
                    occurrences.append(occurrence)
        except (ijson.JSONError, UnicodeDecodeError) as e:
            raise DecodeError(f"Malformed trace JSON: {e}") from e

        if not occurrences:
            raise DecodeError("Trace has no events")

        logger.debug(f"Read {entry_count} trace entries, {len(occurrences)} timed events")
        return sort_occurrences(occurrences)

    @staticmethod
    def _events_prefix(stream: BinaryIO) -> str:
        """
        Pick the ijson prefix for the event array from the first JSON token.

        Leaves the stream positioned at the start of the JSON text.
        """
        chunk = stream.read(64)
        offset = 0
        if chunk.startswith(UTF8_BOM):
            offset = len(UTF8_BOM)
            chunk = chunk[offset:]
        head = chunk.lstrip()
        # Leading whitespace can span any number of chunks.
        while chunk and not head:
            chunk = stream.read(64)
            head = chunk.lstrip()
        stream.seek(offset)
        if head.startswith(b'['):
            return 'item'
        if head.startswith(b'{'):
            return 'traceEvents.item'
        raise DecodeError("Trace is neither a JSON object nor a JSON array")

    @staticmethod
    def _to_occurrence(entry: Any) -> Optional[Occurrence]:
        """
        Convert one trace entry, or return None for metadata records.

        Raises:
            DecodeError: If required fields are missing or out of range
        """
        if not isinstance(entry, dict):
            raise DecodeError(f"Trace event is not an object: {entry!r}")

        phase = entry.get('ph', '')
        if phase == 'M':
            return None

        name = entry.get('name')
        if not isinstance(name, str):
            raise DecodeError(f"Trace event has no name: {entry!r}")

        ts = entry.get('ts')
        if not _is_number(ts) or ts < 0:
            raise DecodeError(f"Trace event {name} has invalid ts: {ts!r}")
        dur = entry.get('dur')
        if dur is not None and (not _is_number(dur) or dur < 0):
            raise DecodeError(f"Trace event {name} has invalid dur: {dur!r}")

        args = entry.get('args') or {}
        if not isinstance(args, dict):
            raise DecodeError(f"Trace event {name} has non-object args")

        try:
            start = from_micros(ts)
            end = start + from_micros(dur) if dur is not None else None
        except MetricError as e:
            raise DecodeError(f"Trace event {name}: {e}") from e

        return Occurrence(
            name=name,
            category=entry.get('cat', '') or '',
            start=start,
            end=end,
            navigation_id=first_match(NAVIGATION_ID_LOOKUPS, args),
            frame_id=first_match(FRAME_LOOKUPS, args),
            url=first_match(DOCUMENT_URL_LOOKUPS, args),
            phase=phase,
        )
