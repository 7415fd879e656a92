"""
Synthetic Mention Generator
----------------------------
Produces plausible mention records when a live source is unavailable,
unconfigured, empty or rate-limited.

This is FAKE data. Every record carries a `fallback_<platform>_` id and the
fetchers report `is_real_data=False` alongside it.
"""

import random
import string
import time
from datetime import datetime, timedelta
from typing import List, Optional

from models.schemas import Mention, Platform


TWITTER_TEMPLATES = [
    # positive
    "Just tried {company} and I'm impressed with the quality! 👏",
    "{company} exceeded my expectations. I recommend it a lot! ⭐⭐⭐⭐⭐",
    "Customer service at {company} was excellent today. Congrats! 🙌",
    "My {company} order arrived early. Very satisfied and happy! 📦✨",
    "{company} keeps innovating. I love this company! 💙",
    "Best experience I've ever had with {company}. Amazing! 🔥",
    "{company} has the best value for money on the market 💰",
    "The new {company} app interface looks great! Kudos to the design team 🎨",
    # negative
    "{company} disappointed me today. Expected more... 😞",
    "{company} support took 3 hours to reply. Terrible and slow! 😡",
    "My {company} product arrived with a defect. So frustrated! 😤",
    "{company} raised prices without notice. Bad move 📈💸",
    "The {company} app crashed 3 times today. This bug is a real problem! 📱❌",
    "{company} just lost a customer. Awful service! 👎",
    "{company} delivery is one week late with zero communication. Upset 📦⏰",
    # neutral
    "Has anyone used {company}? How was the experience? 🤔",
    "{company} launched a new product. Will test it and report back 👀",
    "Comparing {company} with other options on the market 📊",
    "{company} is running a promotion. Is it worth it? 🏷️",
    "Tutorial on how to use {company}: [link] 📚",
    "{company} will be at the tech fair this year 🏢",
    "Researching {company} for a college project 🎓",
    "{company} announced a partnership with another company 🤝",
]

REDDIT_TEMPLATES = [
    # positive
    "Amazing experience with {company} - full review",
    "Is {company} worth it? My take after 6 months of use",
    "Why {company} is the best option on the market [Discussion]",
    "{company} solved my issue in minutes - very satisfied!",
    "Comparison: {company} vs competitors - {company} won",
    "{company} exceeded every expectation - AMA",
    "Tip: how to get the most out of {company}",
    "{company} has the best customer service I've ever seen",
    # negative
    "{company} disappointed me - anyone else go through this?",
    "Problems with {company} - need help",
    "{company} got much worse over the last few months",
    "I cancelled my {company} account - here is why",
    "{company} vs [Competitor] - why I switched",
    "Be careful with {company} - my bad experience",
    "{company} did not deliver what was promised - frustrated",
    "Anyone else having problems with {company}?",
    # neutral
    "Questions about {company} - can anyone help?",
    "{company} launched something new - what do you think?",
    "Survey about {company} for my thesis",
    "{company} is on sale - worth it?",
    "Tutorial: how to use {company} [Complete Guide]",
    "{company} vs other options - discussion",
    "Unbiased opinion about {company}",
    "{company} announced a partnership - thoughts?",
]

SUBREDDITS = [
    "brasil", "investimentos", "tecnologia", "startups",
    "financas", "reviews", "consumidores",
]

MIN_MENTIONS = 8
MAX_MENTIONS = 20
VIRAL_PROBABILITY = 0.1


class SyntheticDataGenerator:
    """Builds a randomized mention batch from per-platform templates."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def templates_for(platform: Platform) -> List[str]:
        return TWITTER_TEMPLATES if platform == Platform.TWITTER else REDDIT_TEMPLATES

    def generate(self, company_name: str, platform: Platform) -> List[Mention]:
        templates = self.templates_for(platform)
        upper = min(MAX_MENTIONS, len(templates))
        count = self.rng.randint(MIN_MENTIONS, upper)
        selected = self.rng.sample(templates, count)

        now = datetime.utcnow()
        now_ms = int(time.time() * 1000)
        mentions = []
        for index, template in enumerate(selected):
            likes, retweets, replies = self._engagement(platform)
            subreddit = self.rng.choice(SUBREDDITS) if platform == Platform.REDDIT else None
            mentions.append(Mention(
                id=f"fallback_{platform.value}_{now_ms}_{index}_{self._token(9)}",
                content=template.format(company=company_name),
                author=f"user_{self._token(8)}",
                likes=likes,
                retweets=retweets,
                replies=replies,
                created_at=now - timedelta(seconds=self.rng.random() * 24 * 3600),
                platform=platform,
                subreddit=subreddit,
            ))
        return mentions

    def _engagement(self, platform: Platform):
        base = self.rng.random() * 100
        viral = self.rng.random() < VIRAL_PROBABILITY

        if platform == Platform.TWITTER:
            if viral:
                likes = int(base * 10 + self.rng.random() * 500)
            else:
                likes = int(base + self.rng.random() * 50)
            retweets = int(likes * (0.1 + self.rng.random() * 0.3))
            replies = int(likes * (0.05 + self.rng.random() * 0.15))
            return likes, retweets, replies

        # Reddit: more conservative upvotes, no re-shares, discussion-heavy
        if viral:
            likes = int(base * 5 + self.rng.random() * 200)
        else:
            likes = int(base * 0.5 + self.rng.random() * 25)
        replies = int(likes * (0.2 + self.rng.random() * 0.4))
        return likes, 0, replies

    def _token(self, length: int) -> str:
        alphabet = string.ascii_lowercase + string.digits
        return "".join(self.rng.choice(alphabet) for _ in range(length))
