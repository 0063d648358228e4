"""Feedback capture and lookup contracts."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from .common import TargetRef, TenantScoped


class FeedbackRequest(TenantScoped):
    """A user's decision on a suggested classification."""

    transaction_id: UUID
    original_description: str = Field(..., min_length=1)
    amount: Decimal | None = None
    transaction_date: date | None = None
    suggested_category_id: UUID | None = None
    suggested_subject_id: UUID | None = None
    suggested_detail_id: UUID | None = None
    suggestion_confidence: float | None = Field(None, ge=0, le=100)
    suggestion_method: str | None = None
    corrected_category_id: UUID
    corrected_subject_id: UUID
    corrected_detail_id: UUID | None = None
    created_by: str | None = None


class FeedbackResponse(BaseModel):
    stored: bool
    feedback_id: UUID | None = None
    reason: str | None = None
    reindex_scheduled: bool = False


class FeedbackStatsResponse(BaseModel):
    total_feedbacks: int
    unique_transactions: int
    avg_original_confidence: float | None = None
    high_confidence_corrections: int
    low_confidence_corrections: int
    categories_involved: int
    subjects_involved: int
    first_feedback_at: datetime | None = None
    last_feedback_at: datetime | None = None


class LearningDataRequest(TenantScoped):
    description: str = Field(..., min_length=1)
    limit: int = Field(10, ge=1, le=100)


class LearningDataItem(BaseModel):
    feedback_id: UUID
    original_description: str
    amount: Decimal | None = None
    classification: TargetRef
    suggestion_method: str | None = None
    similarity: float
    created_at: datetime


class LearningDataResponse(BaseModel):
    items: list[LearningDataItem]
    total: int


class BestMatchRequest(TenantScoped):
    description: str = Field(..., min_length=1)
    amount: Decimal | None = None


class BestMatch(BaseModel):
    """Closest past correction; scores are percentages."""

    classification: TargetRef
    confidence: int
    text_similarity: int
    amount_proximity: int
    matched_description: str
    matched_amount: Decimal | None = None
    method: str


class BestMatchResponse(BaseModel):
    match_found: bool
    match: BestMatch | None = None
