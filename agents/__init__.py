from .base import Agent, AgentResult, Orchestrator
from .fetcher import MentionFetchAgent, TwitterFetcher, RedditFetcher, build_fetchers
from .sentiment import SentimentAgent, analyze_sentiment, extract_topics
from .report import ReportAgent

__all__ = [
    "Agent", "AgentResult", "Orchestrator",
    "MentionFetchAgent", "TwitterFetcher", "RedditFetcher", "build_fetchers",
    "SentimentAgent", "analyze_sentiment", "extract_topics",
    "ReportAgent",
]
