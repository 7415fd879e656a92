"""
Batch metrics over classified mentions.

  sentiment_score = (positive - negative) / total + 0.5
  engagement_rate = Σ(likes + retweets + replies) / total / 100
  reach_estimate  = Σ(likes + 10 · retweets)

sentiment_score is NOT clamped: a neutral batch sits at 0.5, an
all-positive batch at 1.5 and an all-negative one at -0.5. Consumers must
not assume [0, 1].
"""

from typing import Sequence

from models.schemas import AnalysisMetrics, ClassifiedMention

RETWEET_REACH_WEIGHT = 10


class EmptyBatchError(ValueError):
    """Raised when there is nothing to aggregate."""


def aggregate_metrics(classified: Sequence[ClassifiedMention]) -> AnalysisMetrics:
    total = len(classified)
    if total == 0:
        raise EmptyBatchError("Cannot aggregate an empty mention batch")

    positive = sum(1 for c in classified if c.sentiment == "positive")
    negative = sum(1 for c in classified if c.sentiment == "negative")
    neutral = sum(1 for c in classified if c.sentiment == "neutral")

    engagement = sum(c.mention.engagement for c in classified)
    reach = sum(
        c.mention.likes + c.mention.retweets * RETWEET_REACH_WEIGHT for c in classified
    )

    return AnalysisMetrics(
        total_tweets=total,
        positive_tweets=positive,
        negative_tweets=negative,
        neutral_tweets=neutral,
        sentiment_score=(positive - negative) / total + 0.5,
        engagement_rate=engagement / total / 100,
        reach_estimate=reach,
    )
