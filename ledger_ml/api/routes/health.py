"""Health check endpoint."""

from fastapi import APIRouter, Response, status
from ledger_ml_contracts import HealthResponse, ServiceHealth

from ledger_ml import __version__
from ledger_ml.api.dependencies import InfraDep
from ledger_ml.inference import check_health

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(infra: InfraDep, response: Response) -> HealthResponse:
    """Probe the embedding service and vector index. 503 when degraded."""
    report = await check_health(infra.embedder, infra.vector_index)
    if report.overall_status != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        overall_status=report.overall_status,
        version=__version__,
        embedding_service=ServiceHealth(**vars(report.embedding_service)),
        vector_index=ServiceHealth(**vars(report.vector_index)),
        capabilities=report.capabilities,
    )
