"""
Pydantic schemas for API request/response validation.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime


# ─── Request Schemas ─────────────────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Validated in the route so both failures map to 400, not 422
    company_name: Optional[str] = Field(None, alias="companyName")
    # Defaults only when absent; "" and null are rejected
    platform: Optional[str] = Field("twitter", description="twitter | reddit")


# ─── Response Schemas ────────────────────────────────────────────────────────

class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    analysis_id: int = Field(..., alias="analysisId")
    message: str
    platform: str
    data_source: str = Field(..., alias="dataSource", description="real | simulated")
    total_tweets: int = Field(..., alias="totalTweets")
    api_status: str = Field(..., alias="apiStatus", description="active | fallback")
    error_message: Optional[str] = Field(None, alias="errorMessage")


class DeleteAnalysisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    deleted_analysis_id: int = Field(..., alias="deletedAnalysisId")
    company_deleted: bool = Field(..., alias="companyDeleted")


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    credentials: Dict[str, bool] = {}


AnalysisPayload = Dict[str, Any]
HistoryPayload = List[AnalysisPayload]
