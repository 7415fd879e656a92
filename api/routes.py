"""
FastAPI Route Handlers
Voice of Customer Analyzer
"""

import logging
from datetime import datetime
from typing import Dict

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.schemas import (
    AnalyzeRequest, AnalyzeResponse, DeleteAnalysisResponse, HealthResponse,
    AnalysisPayload, HistoryPayload,
)
from agents.fetcher import PlatformFetcher, build_fetchers
from agents.metrics import EmptyBatchError
from config.settings import settings
from db import crud
from db.database import get_db_dependency
from models.schemas import Platform
from utils.pipeline import PipelineError, run_analysis
from utils.report import render_report_html, report_filename

logger = logging.getLogger(__name__)

router = APIRouter()

# Process-wide: one shared cache, one rate limiter per platform
_fetchers: Dict[Platform, PlatformFetcher] = build_fetchers(settings)


def get_fetchers() -> Dict[Platform, PlatformFetcher]:
    return _fetchers


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
def health_check(fetchers: Dict[Platform, PlatformFetcher] = Depends(get_fetchers)):
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow(),
        credentials={p.value: f.is_configured() for p, f in fetchers.items()},
    )


# ─── Analysis ────────────────────────────────────────────────────────────────

@router.post(
    "/analyze", response_model=AnalyzeResponse,
    response_model_exclude_none=True, tags=["Analysis"],
)
def analyze(
    request: AnalyzeRequest,
    db: Session = Depends(get_db_dependency),
    fetchers: Dict[Platform, PlatformFetcher] = Depends(get_fetchers),
):
    """
    Fetch → Classify → Aggregate → Persist, then return a
    provenance-annotated summary.
    """
    company_name = (request.company_name or "").strip()
    if not company_name:
        raise HTTPException(status_code=400, detail="Company name is required")

    if request.platform not in {p.value for p in Platform}:
        raise HTTPException(status_code=400, detail='Platform must be "twitter" or "reddit"')
    platform = Platform(request.platform)

    logger.info(f"Starting analysis for '{company_name}' on {platform.value}")

    try:
        report = run_analysis(company_name, platform, fetcher=fetchers[platform])
    except EmptyBatchError:
        raise HTTPException(status_code=404, detail={
            "error": f"No {platform.content_noun} found for analysis",
            "suggestion": "Try again later or check that the company name is correct",
        })
    except PipelineError as e:
        logger.error(f"Analysis failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    try:
        company = crud.get_or_create_company(db, company_name)
        analysis = crud.create_analysis(db, company, report)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist analysis for '{company_name}': {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(
        f"Analysis {analysis.analysis_id} done: {report.metrics.total_tweets} "
        f"{platform.content_noun}, real={report.is_real_data}"
    )

    name = platform.display_name
    if report.is_real_data:
        message = f"Analysis completed with real {name} API data"
    elif report.error_message:
        message = f"Analysis completed with simulated data: {report.error_message}"
    else:
        message = "Analysis completed with simulated data"

    return AnalyzeResponse(
        analysis_id=analysis.analysis_id,
        message=message,
        platform=platform.value,
        data_source=report.data_source,
        total_tweets=report.metrics.total_tweets,
        api_status=report.api_status,
        error_message=None if report.is_real_data else report.error_message,
    )


# ─── History ─────────────────────────────────────────────────────────────────

@router.get("/history", response_model=HistoryPayload, tags=["Analysis"])
def get_history(db: Session = Depends(get_db_dependency)):
    """Latest analyses, newest first."""
    analyses = crud.list_analyses(db, limit=settings.HISTORY_LIMIT)
    return [a.to_dict() for a in analyses]


@router.get("/analysis/{analysis_id}", response_model=AnalysisPayload, tags=["Analysis"])
def get_analysis(analysis_id: int, db: Session = Depends(get_db_dependency)):
    analysis = crud.get_analysis(db, analysis_id, with_mentions=True)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis.to_dict(include_mentions=True)


@router.delete("/analysis/{analysis_id}", response_model=DeleteAnalysisResponse, tags=["Analysis"])
def delete_analysis(analysis_id: int, db: Session = Depends(get_db_dependency)):
    """Delete an analysis; its company goes too when no analysis remains."""
    try:
        outcome = crud.delete_analysis(db, analysis_id)
        if outcome is None:
            raise HTTPException(status_code=404, detail="Analysis not found")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete analysis {analysis_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    deleted_id, company_deleted = outcome
    return DeleteAnalysisResponse(
        message="Analysis deleted successfully",
        deleted_analysis_id=deleted_id,
        company_deleted=company_deleted,
    )


@router.get("/analysis/{analysis_id}/pdf", response_class=HTMLResponse, tags=["Analysis"])
def export_analysis(analysis_id: int, db: Session = Depends(get_db_dependency)):
    """Downloadable static HTML report."""
    analysis = crud.get_analysis(db, analysis_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")

    html = render_report_html(
        analysis.company.name,
        {
            "platform": analysis.platform,
            "is_real_data": analysis.is_real_data,
            "total_tweets": analysis.total_tweets,
            "positive_tweets": analysis.positive_tweets,
            "negative_tweets": analysis.negative_tweets,
            "neutral_tweets": analysis.neutral_tweets,
            "sentiment_score": analysis.sentiment_score,
            "engagement_rate": analysis.engagement_rate,
            "reach_estimate": analysis.reach_estimate,
            "top_topics": analysis.top_topics,
            "competitors": analysis.competitors,
            "insights": analysis.insights,
        },
        created_at=analysis.created_at,
    )
    filename = report_filename(analysis.company.name, analysis.created_at or datetime.utcnow())
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
