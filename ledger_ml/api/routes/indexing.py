"""Vector indexing endpoints."""

import logging

from fastapi import APIRouter
from ledger_ml_contracts import (
    IndexBatchRequest,
    IndexResponse,
    IndexTransactionRequest,
    ReindexRequest,
)

from ledger_ml.api.dependencies import IndexingDep, SessionDep, to_http_error
from ledger_ml.errors import LedgerMLError
from ledger_ml.inference.indexing import IndexResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/index")


def _to_response(result: IndexResult) -> IndexResponse:
    return IndexResponse(
        indexed_count=result.indexed_count,
        skipped_count=result.skipped_count,
        collection=result.collection,
        latency_ms=result.latency_ms,
        avg_latency_per_transaction_ms=result.avg_latency_per_transaction_ms,
    )


@router.post("/transaction", response_model=IndexResponse)
async def index_transaction(
    request: IndexTransactionRequest,
    indexing: IndexingDep,
    session: SessionDep,
) -> IndexResponse:
    """Index one classified transaction."""
    try:
        result = await indexing.index_transaction(session, request.tenant, request.transaction_id)
    except LedgerMLError as e:
        raise to_http_error(e) from e
    return _to_response(result)


@router.post("/batch", response_model=IndexResponse)
async def index_batch(
    request: IndexBatchRequest,
    indexing: IndexingDep,
    session: SessionDep,
) -> IndexResponse:
    """Index up to 50 classified transactions; ineligible ones are skipped."""
    try:
        result = await indexing.index_batch(session, request.tenant, request.transaction_ids)
    except LedgerMLError as e:
        raise to_http_error(e) from e
    return _to_response(result)


@router.post("/reindex", response_model=IndexResponse)
async def reindex(
    request: ReindexRequest,
    indexing: IndexingDep,
    session: SessionDep,
) -> IndexResponse:
    """Drop and rebuild the tenant's vector collection."""
    logger.info("POST /index/reindex: tenant=%s, limit=%s", request.tenant, request.limit)
    try:
        result = await indexing.reindex_all(session, request.tenant, request.limit)
    except LedgerMLError as e:
        raise to_http_error(e) from e
    return _to_response(result)
