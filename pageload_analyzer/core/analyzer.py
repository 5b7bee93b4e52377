"""
Main page-load analyzer orchestrator.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.errors import InsufficientSamplesError
from ..core.profiles import get_profile
from ..core.types import AnalysisConfig, AnalysisKey
from ..processors import Analysis, ParallelSampleProcessor, TraceConverter
from ..storage import SummaryStore, is_summary_file
from ..web.result_builder import Summaries, build_summaries

logger = logging.getLogger(__name__)


class PageLoadAnalyzer:
    """Main orchestrator for page-load trace analysis."""

    def __init__(
        self,
        engine: str,
        url: str,
        num_workers: Optional[int] = None,
        traceconv_command: Optional[Sequence[str]] = None,
        url_agnostic_categories: Optional[Sequence[str]] = None
    ):
        """
        Initialize the PageLoadAnalyzer.

        Args:
            engine: Engine profile key, 'chromium' or 'servo'
            url: URL of the page whose load is measured
            num_workers: Worker processes for decoding and conversion (default: CPU count)
            traceconv_command: Program used to convert *.pftrace to *.json
            url_agnostic_categories: Categories always kept when scoping Chromium traces

        Raises:
            ValueError: If the engine is unknown
        """
        self.profile = get_profile(engine)
        self.engine = engine
        self.url = url

        # Configuration
        self.config = AnalysisConfig(
            num_workers=num_workers,
            traceconv_command=traceconv_command,
            url_agnostic_categories=url_agnostic_categories,
        )

        # Initialize components
        self.sample_processor = ParallelSampleProcessor(self.config)
        self.converter = TraceConverter(self.config)
        self.store = SummaryStore()

    def analyse_files(self, paths: Sequence[str], key: Optional[AnalysisKey] = None) -> Analysis:
        """
        Analyse sample files, skipping the ones that fail.

        Args:
            paths: Sample files for this analyzer's engine
            key: Optional identity of the analysis

        Returns:
            Analysis of the samples that succeeded

        Raises:
            ManifestError: If a manifest is structurally broken
        """
        logger.info(f"Analysing {len(paths)} {self.profile.kind} samples for {self.url}")

        def progress(completed, total):
            logger.debug(f"Analysed {completed}/{total} samples")

        samples = self.sample_processor.process(self.engine, self.url, paths, progress)
        return Analysis(samples, key=key)

    def compute_summaries(self, paths: Sequence[str], key: Optional[AnalysisKey] = None) -> Summaries:
        """
        Analyse sample files and summarize them.

        Raises:
            InsufficientSamplesError: If no sample could be analysed
        """
        analysis = self.analyse_files(paths, key=key)
        if len(analysis) == 0:
            raise InsufficientSamplesError(f"No samples could be analysed out of {len(paths)}")
        return build_summaries(analysis, self.profile)

    def list_sample_files(self, sample_dir: str) -> List[str]:
        """
        List the sample files of a directory for this analyzer's engine.

        Chromium samples are *.json traces. Servo samples are manifest*.json
        files when any exist, otherwise *.html traces, otherwise *.pftrace
        traces. The store's own summaries.* files are never samples.
        """
        directory = Path(sample_dir)
        if self.profile.key == 'chromium':
            candidates = sorted(directory.glob('*.json'))
        else:
            candidates = sorted(directory.glob('manifest*.json'))
            if not candidates:
                candidates = sorted(directory.glob('*.html'))
            if not candidates:
                candidates = sorted(directory.glob('*.pftrace'))
        return [str(path) for path in candidates if not is_summary_file(str(path))]

    def analyse_directory(self, sample_dir: str, key: Optional[AnalysisKey] = None) -> Summaries:
        """
        Convert pending binary traces, analyse a sample directory and save
        summaries.json and summaries.txt into it.

        Raises:
            ConversionError: If any binary trace failed to convert
            ManifestError: If a manifest is structurally broken
            InsufficientSamplesError: If no sample could be analysed
        """
        # Servo binary traces are decoded natively, only Chromium ones need traceconv.
        if self.profile.key == 'chromium':
            self.converter.convert_directory(sample_dir)

        paths = self.list_sample_files(sample_dir)
        summaries = self.compute_summaries(paths, key=key)
        self.store.save(sample_dir, summaries)
        return summaries
