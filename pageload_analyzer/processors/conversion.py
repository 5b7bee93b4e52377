"""
Conversion of binary Perfetto traces to Chrome JSON traces via traceconv.
"""

import logging
import os
import subprocess
from multiprocessing import Pool
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..core.errors import ConversionError
from ..core.types import AnalysisConfig

logger = logging.getLogger(__name__)

ConversionJob = Tuple[str, str]


def _run_conversion(args: Tuple[List[str], str, str]) -> Tuple[str, Optional[str]]:
    """
    Run one traceconv process. Designed to run in a worker process.

    Args:
        args: Tuple of (command, input path, output path)

    Returns:
        Tuple of (input path, error message or None)
    """
    command, input_path, output_path = args
    argv = list(command) + ['json', input_path, output_path]
    try:
        completed = subprocess.run(argv, capture_output=True, text=True)
    except OSError as e:
        return input_path, f"Failed to run {argv[0]}: {e}"
    if completed.returncode != 0:
        stderr = completed.stderr.strip()
        message = f"{argv[0]} exited with status {completed.returncode}"
        if stderr:
            message = f"{message}: {stderr}"
        return input_path, message
    return input_path, None


class TraceConverter:
    """Converts every *.pftrace in a sample directory that has no *.json yet."""

    def __init__(self, config: AnalysisConfig):
        self.config = config

    @staticmethod
    def pending_jobs(directory: str) -> List[ConversionJob]:
        """
        Find conversions still to be done in `directory`.

        Returns:
            (input, output) pairs, one per output path, sorted by input
        """
        jobs = {}
        for pftrace_path in sorted(Path(directory).glob('*.pftrace')):
            json_path = pftrace_path.with_suffix('.json')
            if json_path.exists() or str(json_path) in jobs:
                continue
            jobs[str(json_path)] = str(pftrace_path)
        return sorted((source, output) for output, source in jobs.items())

    def convert(self, jobs: Sequence[ConversionJob]) -> int:
        """
        Run conversion jobs in parallel and wait for all of them.

        Returns:
            Number of jobs run

        Raises:
            ConversionError: If any job failed, after every job has finished
        """
        if not jobs:
            return 0

        command = list(self.config.traceconv_command)
        work_items = [(command, source, output) for source, output in jobs]
        for _, source, output in work_items:
            logger.info(f"Converting {source} -> {output}")

        workers = min(self.config.num_workers or os.cpu_count() or 1, len(work_items))
        if workers <= 1:
            results = [_run_conversion(item) for item in work_items]
        else:
            with Pool(processes=workers) as pool:
                results = list(pool.imap_unordered(_run_conversion, work_items, chunksize=1))

        failures = sorted((source, error) for source, error in results if error is not None)
        if failures:
            raise ConversionError(failures)
        logger.info(f"Converted {len(work_items)} traces")
        return len(work_items)

    def convert_directory(self, directory: str) -> int:
        return self.convert(self.pending_jobs(directory))
