"""
Page-Load Analyzer - Browser Page-Load Trace Analysis Tool
"""

__version__ = "1.0.0"

from .core.analyzer import PageLoadAnalyzer
from .core.types import AnalysisConfig, AnalysisKey, Event

__all__ = ["PageLoadAnalyzer", "AnalysisConfig", "AnalysisKey", "Event"]
