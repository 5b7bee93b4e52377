"""Storage module for persisted summaries."""

from .summary_store import SummaryStore, is_summary_file, SUMMARIES_JSON, SUMMARIES_TEXT

__all__ = ['SummaryStore', 'is_summary_file', 'SUMMARIES_JSON', 'SUMMARIES_TEXT']
