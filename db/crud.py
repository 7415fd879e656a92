"""
Persistence helpers for companies, analyses and their mentions.

Callers own the transaction: these functions flush but never commit.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from db.models import Analysis, Company, Mention
from models.schemas import VoCReport

logger = logging.getLogger(__name__)


def get_or_create_company(db: Session, name: str) -> Company:
    company = db.execute(select(Company).where(Company.name == name)).scalar_one_or_none()
    if company is None:
        company = Company(name=name)
        db.add(company)
        db.flush()
        logger.info(f"Created company '{name}' (id={company.company_id})")
    return company


def create_analysis(db: Session, company: Company, report: VoCReport) -> Analysis:
    """Persist the analysis row and every mention row in one unit of work."""
    m = report.metrics
    analysis = Analysis(
        company=company,
        platform=report.platform.value,
        is_real_data=report.is_real_data,
        error_message=report.error_message,
        total_tweets=m.total_tweets,
        positive_tweets=m.positive_tweets,
        negative_tweets=m.negative_tweets,
        neutral_tweets=m.neutral_tweets,
        sentiment_score=m.sentiment_score,
        engagement_rate=m.engagement_rate,
        reach_estimate=m.reach_estimate,
        top_topics=list(report.top_topics),
        competitors=[c.to_dict() for c in report.competitors],
        insights=list(report.insights),
    )
    analysis.mentions = [
        Mention(
            external_id=c.mention.id,
            content=c.mention.content,
            author=c.mention.author,
            sentiment=c.sentiment,
            score=c.score,
            confidence=c.confidence,
            likes=c.mention.likes,
            retweets=c.mention.retweets,
            replies=c.mention.replies,
            platform=c.mention.platform.value,
            subreddit=c.mention.subreddit,
            posted_at=c.mention.created_at,
        )
        for c in report.mentions
    ]
    db.add(analysis)
    db.flush()
    return analysis


def list_analyses(db: Session, limit: int = 50) -> List[Analysis]:
    stmt = (
        select(Analysis)
        .options(selectinload(Analysis.company))
        .order_by(Analysis.created_at.desc(), Analysis.analysis_id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def get_analysis(db: Session, analysis_id: int, with_mentions: bool = False) -> Optional[Analysis]:
    stmt = select(Analysis).where(Analysis.analysis_id == analysis_id)
    stmt = stmt.options(selectinload(Analysis.company))
    if with_mentions:
        stmt = stmt.options(selectinload(Analysis.mentions))
    return db.execute(stmt).scalar_one_or_none()


def delete_analysis(db: Session, analysis_id: int) -> Optional[Tuple[int, bool]]:
    """
    Delete an analysis (its mentions cascade). The company goes too once it
    has no analysis left.

    Returns (analysis_id, company_deleted), or None when nothing matched.
    """
    analysis = db.get(Analysis, analysis_id)
    if analysis is None:
        return None

    company_id = analysis.company_id
    db.delete(analysis)
    db.flush()

    remaining = db.execute(
        select(func.count()).select_from(Analysis).where(Analysis.company_id == company_id)
    ).scalar_one()

    company_deleted = remaining == 0
    if company_deleted:
        company = db.get(Company, company_id)
        if company is not None:
            db.delete(company)
            db.flush()
        logger.info(f"Company {company_id} has no analyses left, deleted")
    return analysis_id, company_deleted
