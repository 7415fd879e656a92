"""
Sentiment Classification & Topic Extraction
--------------------------------------------
Keyword-based polarity scoring over a fixed bilingual (Portuguese/English)
lexicon, and frequency-ranked topic extraction over a mention batch.

Exact-match bag of words: no stemming, negation or intensity weighting.

Input:  FetchResult
Output: ClassifiedBatch
"""

import re
from collections import Counter
from typing import Callable, Iterable, List

from agents.base import Agent
from models.schemas import (
    ClassifiedBatch, ClassifiedMention, FetchResult, Platform, SentimentResult,
)


POSITIVE_WORDS = frozenset([
    "bom", "ótimo", "excelente", "maravilhoso", "fantástico", "incrível", "perfeito",
    "amor", "adoro", "gosto", "recomendo", "satisfeito", "feliz", "contente",
    "qualidade", "eficiente", "rápido", "fácil", "útil", "prático", "confiável",
    "good", "great", "excellent", "amazing", "fantastic", "incredible", "perfect",
    "love", "like", "recommend", "satisfied", "happy", "pleased", "awesome",
])

NEGATIVE_WORDS = frozenset([
    "ruim", "péssimo", "horrível", "terrível", "odioso", "detesto", "odeio",
    "problema", "defeito", "falha", "erro", "lento", "difícil", "complicado",
    "insatisfeito", "decepcionado", "frustrado", "irritado", "chateado",
    "bad", "terrible", "horrible", "awful", "hate", "dislike", "disappointed",
    "frustrated", "annoyed", "upset", "problem", "issue", "bug", "slow", "difficult",
])

POLARITY_THRESHOLD = 0.05
NEUTRAL_CONFIDENCE = 0.5
TOPIC_LIMIT = 10

_PUNCTUATION = re.compile(r"[^\w\s]")


def analyze_sentiment(text: str) -> SentimentResult:
    """Score `text` as positive / negative / neutral with a confidence."""
    words = text.lower().split()
    positive = sum(1 for w in words if w in POSITIVE_WORDS)
    negative = sum(1 for w in words if w in NEGATIVE_WORDS)

    net_score = (positive - negative) / max(len(words), 1)

    if net_score > POLARITY_THRESHOLD:
        return SentimentResult("positive", net_score, min(net_score * 10, 1.0))
    if net_score < -POLARITY_THRESHOLD:
        return SentimentResult("negative", net_score, min(abs(net_score) * 10, 1.0))
    return SentimentResult("neutral", net_score, NEUTRAL_CONFIDENCE)


def min_length_filter(word: str) -> bool:
    return len(word) > 3


def tokenize(text: str) -> List[str]:
    return _PUNCTUATION.sub("", text.lower()).split()


def extract_topics(
    texts: Iterable[str],
    limit: int = TOPIC_LIMIT,
    token_filter: Callable[[str], bool] = min_length_filter,
) -> List[str]:
    """
    Most frequent words across `texts`, ties in first-seen order.
    `token_filter` is the only noise reduction (no stopword list by default).
    """
    counts: Counter = Counter()
    for text in texts:
        counts.update(w for w in tokenize(text) if token_filter(w))

    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [word for word, _ in ranked[:limit]]


class SentimentAgent(Agent):
    """
    Agent 2: Sentiment Classifier

    Input:  FetchResult
    Output: ClassifiedBatch
    """

    def __init__(self, company_name: str, platform: Platform):
        super().__init__(name="SentimentAgent")
        self.company_name = company_name
        self.platform = platform

    def run(self, fetched: FetchResult) -> ClassifiedBatch:
        classified = []
        for mention in fetched.mentions:
            result = analyze_sentiment(mention.content)
            classified.append(ClassifiedMention(
                mention=mention,
                sentiment=result.sentiment,
                score=result.score,
                confidence=result.confidence,
            ))

        labels = Counter(c.sentiment for c in classified)
        self.logger.info(
            f"Classified {len(classified)} mentions — "
            f"+{labels['positive']} / -{labels['negative']} / ={labels['neutral']}"
        )
        return ClassifiedBatch(
            company_name=self.company_name,
            platform=self.platform,
            mentions=classified,
            is_real_data=fetched.is_real_data,
            error_message=fetched.error_message,
        )
