"""
Manifest pairing the HTML trace and the Perfetto trace of one run.
"""

import json
from pathlib import Path
from typing import NamedTuple

from ..core.errors import ManifestError


class Manifest(NamedTuple):
    html_path: str
    perfetto_path: str


def load_manifest(manifest_path: str) -> Manifest:
    """
    Load a {"html": <path>, "perfetto": <path>} manifest.

    Relative paths are resolved against the manifest's directory.

    Raises:
        ManifestError: If the manifest is unreadable, malformed, or names
                       a file that does not exist
    """
    path = Path(manifest_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(f"Failed to read manifest {manifest_path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {manifest_path} is not a JSON object")

    resolved = {}
    for key in ('html', 'perfetto'):
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise ManifestError(f"Manifest {manifest_path} has no '{key}' path")
        target = path.parent / value
        if not target.is_file():
            raise ManifestError(f"Manifest {manifest_path} names missing file {target}")
        resolved[key] = str(target)

    return Manifest(html_path=resolved['html'], perfetto_path=resolved['perfetto'])
