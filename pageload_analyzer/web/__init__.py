"""Summaries model and builder shared by the CLI and the web API."""

from .result_builder import RawSeries, Summaries, SummaryEntry, build_summaries

__all__ = ["RawSeries", "Summaries", "SummaryEntry", "build_summaries"]
