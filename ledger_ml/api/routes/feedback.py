"""Feedback endpoints."""

from fastapi import APIRouter
from ledger_ml_contracts import (
    BestMatch,
    BestMatchRequest,
    BestMatchResponse,
    FeedbackRequest,
    FeedbackResponse,
    FeedbackStatsResponse,
    LearningDataItem,
    LearningDataRequest,
    LearningDataResponse,
)

from ledger_ml.api.dependencies import CacheDep, FeedbackServiceDep, SessionDep, TenantQuery
from ledger_ml.api.routes.classify import to_target_ref
from ledger_ml.data_models import NewFeedback
from ledger_ml.inference.shared import ANALYTICS_CACHE, SUGGESTED_RULES_CACHE

router = APIRouter(prefix="/feedback")


@router.post("", response_model=FeedbackResponse)
async def record_feedback(
    request: FeedbackRequest,
    service: FeedbackServiceDep,
    session: SessionDep,
    cache: CacheDep,
) -> FeedbackResponse:
    """Record a user correction. Unchanged suggestions are not stored."""
    feedback = NewFeedback.model_validate(request.model_dump(exclude={"tenant"}))
    outcome = await service.record(session, request.tenant, feedback)
    if outcome.stored:
        # Both are derived from the feedback corpus
        cache.invalidate(SUGGESTED_RULES_CACHE)
        cache.invalidate(ANALYTICS_CACHE)
    return FeedbackResponse(
        stored=outcome.stored,
        feedback_id=outcome.feedback_id,
        reason=outcome.reason,
        reindex_scheduled=outcome.reindex_scheduled,
    )


@router.get("/stats", response_model=FeedbackStatsResponse)
async def feedback_stats(
    tenant: TenantQuery,
    service: FeedbackServiceDep,
    session: SessionDep,
) -> FeedbackStatsResponse:
    stats = await service.stats(session, tenant)
    return FeedbackStatsResponse.model_validate(stats)


@router.post("/learning-data", response_model=LearningDataResponse)
async def learning_data(
    request: LearningDataRequest,
    service: FeedbackServiceDep,
    session: SessionDep,
) -> LearningDataResponse:
    """Past corrections with descriptions similar to the given one."""
    matches = await service.learning_data(
        session, request.tenant, request.description, limit=request.limit
    )
    items = [
        LearningDataItem(
            feedback_id=entry.id,
            original_description=entry.original_description,
            amount=entry.amount,
            classification=to_target_ref(entry.target),
            suggestion_method=entry.suggestion_method,
            similarity=round(similarity, 4),
            created_at=entry.created_at,
        )
        for entry, similarity in matches
    ]
    return LearningDataResponse(items=items, total=len(items))


@router.post("/best-match", response_model=BestMatchResponse)
async def best_match(
    request: BestMatchRequest,
    service: FeedbackServiceDep,
    session: SessionDep,
) -> BestMatchResponse:
    """The single past correction that best fits a description and amount."""
    match = await service.find_best_match(
        session, request.tenant, request.description, request.amount
    )
    if match is None:
        return BestMatchResponse(match_found=False)

    entry = match.entry
    return BestMatchResponse(
        match_found=True,
        match=BestMatch(
            classification=to_target_ref(entry.target),
            confidence=match.confidence,
            text_similarity=round(match.text_similarity * 100),
            amount_proximity=round(match.amount_proximity * 100),
            matched_description=entry.original_description,
            matched_amount=entry.amount,
            method=match.method,
        ),
    )
