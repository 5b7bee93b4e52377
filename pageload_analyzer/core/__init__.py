"""Core components for page-load trace analysis."""

from .analyzer import PageLoadAnalyzer
from .types import AnalysisConfig, AnalysisKey, Event, Occurrence

__all__ = ["PageLoadAnalyzer", "AnalysisConfig", "AnalysisKey", "Event", "Occurrence"]
