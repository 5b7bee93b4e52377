"""
Parallel sample processor for analysing many sample files at once.
"""

import logging
from multiprocessing import Pool
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.errors import AnalysisError, ManifestError
from ..core.profiles import get_profile
from ..core.types import AnalysisConfig
from .sample_builder import Sample, SampleBuilder

logger = logging.getLogger(__name__)


def _analyse_single_sample(
    args: Tuple[str, str, str, Dict[str, Any]]
) -> Tuple[str, Optional[Sample], Optional[str], bool]:
    """
    Analyse one sample file. Designed to run in a worker process.

    Args:
        args: Tuple of (engine, url, path, config_dict)

    Returns:
        Tuple of (path, sample or None, error message or None, fatal)
    """
    engine, url, path, config_dict = args

    config = AnalysisConfig.from_dict(config_dict)
    builder = SampleBuilder(get_profile(engine), config)

    try:
        return path, builder.build(path, url), None, False
    except ManifestError as e:
        return path, None, str(e), True
    except (AnalysisError, OSError) as e:
        return path, None, str(e), False


class ParallelSampleProcessor:
    """Analyse sample files in parallel using multiprocessing."""

    def __init__(self, config: AnalysisConfig):
        """
        Initialize parallel processor.

        Args:
            config: AnalysisConfig instance; num_workers sets the pool size
        """
        self.config = config
        self.num_workers = config.num_workers
        self.config_dict = config.to_dict()

    def process(
        self,
        engine: str,
        url: str,
        paths: Sequence[str],
        progress_callback=None
    ) -> List[Sample]:
        """
        Analyse sample files, skipping the ones that fail.

        Args:
            engine: Engine profile key
            url: Target page URL
            paths: Sample files (traces or manifests)
            progress_callback: Optional callback(completed, total) for progress updates

        Returns:
            Samples that were analysed successfully, ordered by path

        Raises:
            ManifestError: If a manifest is structurally broken
        """
        work_items = [(engine, url, path, self.config_dict) for path in paths]
        total = len(work_items)

        if total <= 1 or self.num_workers <= 1:
            results = self._process_sequential(work_items, progress_callback)
        else:
            results = []
            effective_workers = min(self.num_workers, total)
            with Pool(processes=effective_workers) as pool:
                for result in pool.imap_unordered(_analyse_single_sample, work_items, chunksize=1):
                    results.append(result)
                    if progress_callback:
                        progress_callback(len(results), total)

        samples = []
        for path, sample, error, fatal in results:
            if fatal:
                raise ManifestError(error)
            if error is not None:
                logger.warning(f"Failed to analyse {path}: {error}")
                continue
            samples.append(sample)

        samples.sort(key=lambda s: s.path)
        logger.info(f"Analysed {len(samples)} of {total} samples")
        return samples

    def _process_sequential(self, work_items, progress_callback=None):
        """
        Fallback sequential processing for a single file or single worker.
        """
        results = []
        for item in work_items:
            results.append(_analyse_single_sample(item))
            if progress_callback:
                progress_callback(len(results), len(work_items))
        return results
