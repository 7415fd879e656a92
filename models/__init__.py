"""
Core data models for the Voice of Customer analyzer.
"""

from .schemas import (
    Platform,
    Mention,
    FetchResult,
    SentimentResult,
    ClassifiedMention,
    ClassifiedBatch,
    AnalysisMetrics,
    CompetitorRecord,
    VoCReport,
)

__all__ = [
    "Platform",
    "Mention",
    "FetchResult",
    "SentimentResult",
    "ClassifiedMention",
    "ClassifiedBatch",
    "AnalysisMetrics",
    "CompetitorRecord",
    "VoCReport",
]
