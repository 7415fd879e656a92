"""
Competitor synthesis. There is no real competitor lookup: names and metrics
are always random, and `company_name` is only context.
"""

import random
from typing import List, Optional

from models.schemas import CompetitorRecord

COMPETITOR_PREFIXES = ["Smart", "Quick", "Easy", "Fast", "Best", "Top", "Prime"]
COMPETITOR_SUFFIXES = ["Tech", "Pro", "Plus", "Digital", "Solutions", "Corp", "Group"]


def synthesize_competitors(
    company_name: str,
    count: int = 3,
    rng: Optional[random.Random] = None,
) -> List[CompetitorRecord]:
    """Random prefix+suffix names; duplicates across the set are allowed."""
    rng = rng or random.Random()
    competitors = []
    for _ in range(count):
        name = f"{rng.choice(COMPETITOR_PREFIXES)}{rng.choice(COMPETITOR_SUFFIXES)}"
        competitors.append(CompetitorRecord(
            name=name,
            sentiment_score=rng.uniform(0.2, 0.8),
            total_mentions=rng.randrange(100, 600),
            engagement_rate=rng.uniform(0.02, 0.12),
        ))
    return competitors
