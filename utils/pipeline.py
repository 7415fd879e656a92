"""
Pipeline runner: wires the three agents together and returns a VoCReport.

Architecture:
  MentionFetchAgent → SentimentAgent → ReportAgent
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from agents.base import Orchestrator
from agents.fetcher import MentionFetchAgent, PlatformFetcher, build_fetchers
from agents.metrics import EmptyBatchError
from agents.report import ReportAgent
from agents.sentiment import SentimentAgent
from models.schemas import Platform, VoCReport

logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
    """A pipeline stage failed for a reason with no defined fallback."""


def run_analysis(
    company_name: str,
    platform: Platform,
    fetcher: Optional[PlatformFetcher] = None,
    fetchers: Optional[Dict[Platform, PlatformFetcher]] = None,
) -> VoCReport:
    """
    Fetch, classify and aggregate mentions of `company_name` on `platform`.

    Raises
    ------
    EmptyBatchError
        The fetch produced no mentions at all, not even simulated ones.
    PipelineError
        Any other stage failure.
    """
    if fetcher is None:
        fetcher = (fetchers or build_fetchers())[platform]

    pipeline = Orchestrator([
        MentionFetchAgent(fetcher),
        SentimentAgent(company_name, platform),
        ReportAgent(),
    ])

    result = pipeline.execute(company_name)
    logger.debug(pipeline.summary())

    if not result.success:
        if isinstance(result.exception, EmptyBatchError):
            raise result.exception
        raise PipelineError(f"{result.agent_name} failed: {result.error}")

    return result.data
