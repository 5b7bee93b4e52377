"""
Summary store for persisting and retrieving per-directory analysis summaries.

Each sample directory holds its own summaries.json (machine-readable) and
summaries.txt (human-readable) next to the traces they were computed from.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..core.errors import SummaryStoreError
from ..core.types import AnalysisKey
from ..web.result_builder import Summaries

logger = logging.getLogger(__name__)

SUMMARIES_STEM = 'summaries'
SUMMARIES_JSON = f'{SUMMARIES_STEM}.json'
SUMMARIES_TEXT = f'{SUMMARIES_STEM}.txt'


def is_summary_file(path: str) -> bool:
    """True for the store's own output files, which are never samples."""
    return Path(path).stem == SUMMARIES_STEM


class SummaryStore:
    """
    File-based storage for analysis summaries.

    Files are stored as: {sample_dir}/summaries.json and {sample_dir}/summaries.txt
    """

    def save(self, sample_dir: str, summaries: Summaries) -> Path:
        """
        Write both summary files into `sample_dir`.

        Returns:
            Path of the JSON file
        """
        directory = Path(sample_dir)
        directory.mkdir(parents=True, exist_ok=True)

        json_path = directory / SUMMARIES_JSON
        with open(json_path, 'w', encoding='utf-8') as f:
            f.write(summaries.to_json())
        with open(directory / SUMMARIES_TEXT, 'w', encoding='utf-8') as f:
            f.write(summaries.to_text())

        logger.info(f"Wrote {json_path}")
        return json_path

    def load(self, sample_dir: str) -> Optional[Summaries]:
        """
        Read summaries back from `sample_dir`.

        Returns:
            Summaries if the directory has been analysed, None otherwise

        Raises:
            SummaryStoreError: If the stored file is corrupt
        """
        json_path = Path(sample_dir) / SUMMARIES_JSON
        if not json_path.exists():
            return None

        try:
            with open(json_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return Summaries.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise SummaryStoreError(f"Corrupt summaries file {json_path}: {e}") from e

    def load_keyed(self, root: str, keys: Iterable[AnalysisKey]) -> Dict[AnalysisKey, Summaries]:
        """
        Load summaries for each <root>/<cpu_config>/<site>/<engine> directory.

        Keys whose directory has no summaries yet are skipped.
        """
        result = {}
        for key in keys:
            summaries = self.load(str(Path(root) / key.relative_dir()))
            if summaries is None:
                logger.debug(f"No summaries for {key}")
                continue
            result[key] = summaries
        return result
