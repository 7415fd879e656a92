"""
Core data models / schemas for the Voice of Customer analyzer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any
from datetime import datetime


class Platform(str, Enum):
    TWITTER = "twitter"
    REDDIT = "reddit"

    @property
    def display_name(self) -> str:
        return "Twitter" if self is Platform.TWITTER else "Reddit"

    @property
    def content_noun(self) -> str:
        return "tweets" if self is Platform.TWITTER else "posts"


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Mention:
    """One piece of platform content about the searched company."""
    id: str                         # real_… | reddit_… | fallback_<platform>_…
    content: str
    author: str
    likes: int
    retweets: int                   # always 0 for Reddit
    replies: int
    created_at: datetime
    platform: Platform
    subreddit: Optional[str] = None

    @property
    def engagement(self) -> int:
        return self.likes + self.retweets + self.replies


@dataclass
class FetchResult:
    """Mentions plus provenance, as returned by a platform fetcher."""
    mentions: List[Mention]
    is_real_data: bool
    error_message: Optional[str] = None


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SentimentResult:
    sentiment: str                  # positive / negative / neutral
    score: float                    # net polarity / token count
    confidence: float               # [0, 1]


@dataclass(frozen=True)
class ClassifiedMention:
    mention: Mention
    sentiment: str
    score: float
    confidence: float


@dataclass
class ClassifiedBatch:
    """Classified mentions carried forward with the fetch provenance."""
    company_name: str
    platform: Platform
    mentions: List[ClassifiedMention]
    is_real_data: bool
    error_message: Optional[str] = None


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass
class AnalysisMetrics:
    total_tweets: int
    positive_tweets: int
    negative_tweets: int
    neutral_tweets: int
    sentiment_score: float          # not clamped, ~[-0.5, 1.5]
    engagement_rate: float
    reach_estimate: int


@dataclass
class CompetitorRecord:
    name: str
    sentiment_score: float
    total_mentions: int
    engagement_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "sentimentScore": self.sentiment_score,
            "totalMentions": self.total_mentions,
            "engagementRate": self.engagement_rate,
        }


# ---------------------------------------------------------------------------
# Pipeline run summary
# ---------------------------------------------------------------------------

@dataclass
class VoCReport:
    company_name: str
    platform: Platform
    is_real_data: bool
    metrics: AnalysisMetrics
    mentions: List[ClassifiedMention]
    top_topics: List[str]
    competitors: List[CompetitorRecord]
    insights: List[str]
    error_message: Optional[str] = None
    executed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def data_source(self) -> str:
        return "real" if self.is_real_data else "simulated"

    @property
    def api_status(self) -> str:
        return "active" if self.is_real_data else "fallback"
