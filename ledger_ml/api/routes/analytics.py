"""Analytics and metrics endpoints."""

from fastapi import APIRouter, Query
from ledger_ml_contracts import AnalyticsResponse, MetricsSummaryResponse

from ledger_ml.api.dependencies import (
    AnalyticsDep,
    CacheDep,
    SessionDep,
    TenantQuery,
    repositories,
)
from ledger_ml.inference.shared import ANALYTICS_CACHE

router = APIRouter()


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(
    tenant: TenantQuery,
    session: SessionDep,
    service: AnalyticsDep,
    cache: CacheDep,
    window_days: int = Query(30, ge=1, le=365),
) -> AnalyticsResponse:
    """Classification analytics over a trailing window (cached)."""
    key = (tenant, window_days)
    cached = cache.get(ANALYTICS_CACHE, key)
    if cached is not None:
        return cached.model_copy(update={"cached": True})

    data = await service.analytics(repositories(session, tenant), window_days=window_days)
    response = AnalyticsResponse.model_validate(data)
    cache.set(ANALYTICS_CACHE, key, response)
    return response


@router.get("/metrics", response_model=MetricsSummaryResponse)
async def metrics_summary(
    tenant: TenantQuery,
    session: SessionDep,
    service: AnalyticsDep,
    days: int = Query(7, ge=1, le=90),
) -> MetricsSummaryResponse:
    """Per-stage confidence and latency statistics."""
    data = await service.metrics_summary(repositories(session, tenant), days=days)
    return MetricsSummaryResponse.model_validate(data)
