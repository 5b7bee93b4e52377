"""Processors for turning decoded traces into samples and statistics."""

from .normalizer import EventNormalizer
from .metrics import first_event, relative_metric, sum_duration, unique_relative_metric
from .sample_builder import Sample, SampleBuilder
from .aggregator import Analysis, Summary
from .parallel_processor import ParallelSampleProcessor
from .conversion import TraceConverter

__all__ = [
    "EventNormalizer",
    "first_event",
    "relative_metric",
    "sum_duration",
    "unique_relative_metric",
    "Sample",
    "SampleBuilder",
    "Analysis",
    "Summary",
    "ParallelSampleProcessor",
    "TraceConverter",
]
