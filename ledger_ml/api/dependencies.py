"""FastAPI dependencies.

Services are built once in the app lifespan and stored on `app.state`.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_ml.errors import InvalidRequestError, RuleNotFoundError, TransactionNotFoundError
from ledger_ml.inference import (
    AnalyticsService,
    ClassificationOrchestrator,
    FeedbackService,
    IndexingService,
    RuleSuggestionAnalyzer,
    SharedInfrastructure,
)
from ledger_ml.storage import RepositoryFactory, ResponseCache, get_session
from ledger_ml_contracts.common import TENANT_PATTERN


def get_infra(request: Request) -> SharedInfrastructure:
    return request.app.state.infra


def get_orchestrator(request: Request) -> ClassificationOrchestrator:
    return request.app.state.classification


def get_indexing(request: Request) -> IndexingService:
    return request.app.state.indexing


def get_feedback_service(request: Request) -> FeedbackService:
    return request.app.state.feedback


def get_suggestion_analyzer(request: Request) -> RuleSuggestionAnalyzer:
    return request.app.state.suggestions


def get_analytics(request: Request) -> AnalyticsService:
    return request.app.state.analytics


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.infra.cache


SessionDep = Annotated[AsyncSession, Depends(get_session)]
TenantQuery = Annotated[str, Query(pattern=TENANT_PATTERN)]
InfraDep = Annotated[SharedInfrastructure, Depends(get_infra)]
OrchestratorDep = Annotated[ClassificationOrchestrator, Depends(get_orchestrator)]
IndexingDep = Annotated[IndexingService, Depends(get_indexing)]
FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]
SuggestionAnalyzerDep = Annotated[RuleSuggestionAnalyzer, Depends(get_suggestion_analyzer)]
AnalyticsDep = Annotated[AnalyticsService, Depends(get_analytics)]
CacheDep = Annotated[ResponseCache, Depends(get_cache)]


def repositories(session: AsyncSession, tenant: str) -> RepositoryFactory:
    return RepositoryFactory(session, tenant)


def to_http_error(error: Exception) -> HTTPException:
    """Map service errors to HTTP errors."""
    if isinstance(error, (TransactionNotFoundError, RuleNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, InvalidRequestError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
