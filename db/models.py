"""
SQLAlchemy ORM Models
Voice of Customer Analyzer
"""

from sqlalchemy import (
    Column, Integer, Float, String, Text, Boolean,
    DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime

Base = declarative_base()


class Company(Base):
    __tablename__ = "company"

    company_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    analyses = relationship("Analysis", back_populates="company", cascade="all, delete-orphan")


class Analysis(Base):
    __tablename__ = "analysis"

    analysis_id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("company.company_id", ondelete="CASCADE"), nullable=False)
    platform = Column(String(20), nullable=False)           # twitter | reddit
    is_real_data = Column(Boolean, default=False, nullable=False)
    error_message = Column(Text)
    total_tweets = Column(Integer, nullable=False)
    positive_tweets = Column(Integer, nullable=False)
    negative_tweets = Column(Integer, nullable=False)
    neutral_tweets = Column(Integer, nullable=False)
    sentiment_score = Column(Float)                          # not clamped to [0, 1]
    engagement_rate = Column(Float)
    reach_estimate = Column(Integer)
    top_topics = Column(JSON)
    competitors = Column(JSON)
    insights = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)

    company = relationship("Company", back_populates="analyses")
    mentions = relationship(
        "Mention", back_populates="analysis", cascade="all, delete-orphan",
        order_by="Mention.posted_at.desc()",
    )

    __table_args__ = (
        Index("ix_analysis_company", "company_id"),
        Index("ix_analysis_created", "created_at"),
    )

    def to_dict(self, include_mentions: bool = False) -> dict:
        data = {
            "id": self.analysis_id,
            "companyId": self.company_id,
            "company": {"id": self.company.company_id, "name": self.company.name},
            "platform": self.platform,
            "dataSource": "real" if self.is_real_data else "simulated",
            "errorMessage": self.error_message,
            "totalTweets": self.total_tweets,
            "positiveTweets": self.positive_tweets,
            "negativeTweets": self.negative_tweets,
            "neutralTweets": self.neutral_tweets,
            "sentimentScore": self.sentiment_score,
            "engagementRate": self.engagement_rate,
            "reachEstimate": self.reach_estimate,
            "topTopics": self.top_topics or [],
            "competitors": self.competitors or [],
            "insights": self.insights or [],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_mentions:
            data["tweets"] = [m.to_dict() for m in self.mentions]
        return data


class Mention(Base):
    __tablename__ = "mention"

    mention_id = Column(Integer, primary_key=True, autoincrement=True)
    analysis_id = Column(Integer, ForeignKey("analysis.analysis_id", ondelete="CASCADE"), nullable=False)
    external_id = Column(String(255), nullable=False)       # real_… | reddit_… | fallback_…
    content = Column(Text, nullable=False)
    author = Column(String(255))
    sentiment = Column(String(20))
    score = Column(Float)
    confidence = Column(Float)
    likes = Column(Integer, default=0)
    retweets = Column(Integer, default=0)
    replies = Column(Integer, default=0)
    platform = Column(String(20))
    subreddit = Column(String(255))
    posted_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    analysis = relationship("Analysis", back_populates="mentions")

    __table_args__ = (Index("ix_mention_analysis", "analysis_id"),)

    def to_dict(self) -> dict:
        return {
            "id": self.mention_id,
            "tweetId": self.external_id,
            "content": self.content,
            "author": self.author,
            "sentiment": self.sentiment,
            "score": self.score,
            "confidence": self.confidence,
            "likes": self.likes,
            "retweets": self.retweets,
            "replies": self.replies,
            "platform": self.platform,
            "subreddit": self.subreddit,
            "createdAt": self.posted_at.isoformat() if self.posted_at else None,
        }
