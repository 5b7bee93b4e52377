"""
Exception hierarchy for page-load trace analysis.

Per-sample errors (decode, scope, ambiguity, metric, alignment) cause one
sample to be skipped. Structural errors (manifest, conversion, store) abort
the whole run.
"""


class AnalysisError(Exception):
    """Base class for all analysis errors."""


class DecodeError(AnalysisError):
    """Raised when a trace file is malformed."""


class ScopeError(AnalysisError):
    """Raised when no occurrence can be tied to the target page load."""


class AmbiguityError(AnalysisError):
    """Raised when an event expected to be unique is missing or repeated."""


class MetricError(AnalysisError):
    """Raised when a derived metric is out of range or overflows."""


class AlignmentError(AnalysisError):
    """Raised when two traces of one run do not start with the same event."""


class AggregationError(AnalysisError):
    """Raised when a statistic cannot be computed from the available samples."""


class InsufficientSamplesError(AggregationError):
    """Raised when no sample contributes a value to a summary."""


class UndefinedStatisticError(AggregationError):
    """Raised when a statistic is undefined for the number of samples."""


class ManifestError(AnalysisError):
    """Raised when a dual-trace manifest is missing, malformed or unpaired."""


class ConversionError(AnalysisError):
    """Raised after a conversion batch finishes with one or more failed jobs."""

    def __init__(self, failures):
        self.failures = list(failures)
        lines = [f"{len(self.failures)} conversion job(s) failed:"]
        lines.extend(f"  {source}: {message}" for source, message in self.failures)
        super().__init__("\n".join(lines))


class SummaryStoreError(AnalysisError):
    """Raised when persisted summaries cannot be read back."""
