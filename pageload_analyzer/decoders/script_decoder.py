"""
Decoder for traces embedded in an HTML document as a script body.

The document's first <script> holds
    window.TRACES = [{"category", "startTime", "endTime", "metadata"?}, ...];
with times in nanoseconds. A producer killed mid-write leaves the body
without its closing "];", ending after the last entry's trailing comma.
"""

import json
import logging
from typing import Any, List

import html5lib

from ..core.errors import DecodeError
from ..core.types import Occurrence, sort_occurrences

logger = logging.getLogger(__name__)

SCRIPT_PREFIX = 'window.TRACES = ['
SCRIPT_SUFFIX = '];'


class ScriptDecoder:
    """Decodes script-embedded HTML traces into occurrences."""

    @staticmethod
    def decode_file(file_path: str) -> List[Occurrence]:
        logger.info(f"Decoding {file_path}...")
        with open(file_path, 'rb') as f:
            return ScriptDecoder.decode(f.read())

    @staticmethod
    def decode(data: bytes) -> List[Occurrence]:
        """
        Decode an HTML trace document.

        Args:
            data: Raw bytes of the HTML document (UTF-8)

        Returns:
            Occurrences sorted by start, then end

        Raises:
            DecodeError: If no script of the expected shape is found
        """
        body = ScriptDecoder.extract_script_body(data)
        entries_json = ScriptDecoder.strip_script_body(body)

        try:
            entries = json.loads(f'[{entries_json}]')
        except json.JSONDecodeError as e:
            raise DecodeError(f"Malformed trace entries: {e}") from e

        occurrences = [ScriptDecoder._to_occurrence(entry) for entry in entries]
        logger.debug(f"Read {len(occurrences)} trace entries")
        return sort_occurrences(occurrences)

    @staticmethod
    def extract_script_body(data: bytes) -> str:
        """Return the text of the document's first <script> element."""
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"Document is not UTF-8: {e}") from e

        fragment = html5lib.parseFragment(
            text,
            container='section',
            treebuilder='etree',
            namespaceHTMLElements=False,
        )
        script = next(fragment.iter('script'), None)
        if script is None:
            raise DecodeError("Document has no <script>")
        if not script.text:
            raise DecodeError("First <script> has no text")
        return script.text

    @staticmethod
    def strip_script_body(body: str) -> str:
        """
        Strip the assignment around the entry list, tolerating truncation.

        Returns:
            The comma-separated entries without the trailing comma
        """
        body = body.strip()
        if not body.startswith(SCRIPT_PREFIX):
            raise DecodeError("Failed to strip prefix")
        body = body[len(SCRIPT_PREFIX):].strip()

        # Missing suffix: the producing process was terminated after the last entry.
        if body.endswith(SCRIPT_SUFFIX):
            body = body[:-len(SCRIPT_SUFFIX)]
        body = body.strip()

        if not body.endswith(','):
            raise DecodeError("Failed to strip trailing comma")
        return body[:-1]

    @staticmethod
    def _to_occurrence(entry: Any) -> Occurrence:
        if not isinstance(entry, dict):
            raise DecodeError(f"Trace entry is not an object: {entry!r}")

        category = entry.get('category')
        start = entry.get('startTime')
        end = entry.get('endTime')
        if not isinstance(category, str):
            raise DecodeError(f"Trace entry has no category: {entry!r}")
        for value in (start, end):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise DecodeError(f"Trace entry {category} has invalid times: {entry!r}")
        if end < start:
            raise DecodeError(f"Trace entry {category} ends before it starts")

        metadata = entry.get('metadata') or {}
        if not isinstance(metadata, dict):
            raise DecodeError(f"Trace entry {category} has non-object metadata")
        url = metadata.get('url')

        return Occurrence(
            name=category,
            category=category,
            start=start,
            end=end if end != start else None,
            metadata=dict(metadata),
            url=url if isinstance(url, str) else None,
        )
