"""Classification endpoints."""

import logging
import time
from collections import Counter

from fastapi import APIRouter
from ledger_ml_contracts import (
    ClassificationResponse,
    ClassificationStats,
    ClassifyBatchRequest,
    ClassifyBatchResponse,
    ClassifyRequest,
    SimilarTransaction,
    Suggestion,
    TargetRef,
    TransactionInput,
)

from ledger_ml.api.dependencies import OrchestratorDep, SessionDep
from ledger_ml.data_models import Target, Transaction
from ledger_ml.inference.classification import ClassificationResult
from ledger_ml.inference.classification import SimilarTransaction as SimilarResult
from ledger_ml.inference.classification import Suggestion as SuggestionResult

logger = logging.getLogger(__name__)

router = APIRouter()


def to_transaction(txn: TransactionInput) -> Transaction:
    return Transaction(
        id=txn.transaction_id,
        description=txn.description,
        amount=txn.amount,
        date=txn.date,
        payment_type=txn.payment_type,
        owner_id=txn.owner_id,
    )


def to_target_ref(target: Target) -> TargetRef:
    return TargetRef.model_validate(target.model_dump())


def _to_similar(similar: SimilarResult) -> SimilarTransaction:
    return SimilarTransaction(
        transaction_id=similar.transaction_id,
        description=similar.description,
        amount=similar.amount,
        transaction_date=similar.transaction_date,
        score=similar.score,
    )


def _to_suggestion(suggestion: SuggestionResult) -> Suggestion:
    return Suggestion(
        classification=to_target_ref(suggestion.target),
        confidence=suggestion.confidence,
        reasoning=suggestion.reasoning,
        similar_transactions=[_to_similar(s) for s in suggestion.similar_transactions],
    )


def to_response(result: ClassificationResult) -> ClassificationResponse:
    """Convert ClassificationResult to the contract model."""
    return ClassificationResponse(
        transaction_id=result.transaction_id,
        success=result.success,
        classification=to_target_ref(result.classification) if result.classification else None,
        confidence=result.confidence,
        method=result.method.value,
        reasoning=result.reasoning,
        needs_review=result.needs_review,
        suggestions=[_to_suggestion(s) for s in result.suggestions],
        similar_transactions=[_to_similar(s) for s in result.similar_transactions],
        debug=result.debug,
        latency_ms=result.latency_ms,
        error=result.error,
    )


def _compute_stats(results: list[ClassificationResponse]) -> ClassificationStats:
    return ClassificationStats(
        total=len(results),
        by_method=dict(Counter(r.method for r in results if r.success)),
        needs_review=sum(1 for r in results if r.needs_review),
        failed=sum(1 for r in results if not r.success),
    )


@router.post("/classify", response_model=ClassificationResponse)
async def classify_transaction(
    request: ClassifyRequest,
    orchestrator: OrchestratorDep,
    session: SessionDep,
) -> ClassificationResponse:
    """Classify one transaction. Always answers with a result object."""
    result = await orchestrator.classify(
        session=session,
        transaction=to_transaction(request.transaction),
        tenant=request.tenant,
    )
    return to_response(result)


@router.post("/classify/batch", response_model=ClassifyBatchResponse)
async def classify_batch(
    request: ClassifyBatchRequest,
    orchestrator: OrchestratorDep,
) -> ClassifyBatchResponse:
    """Classify a batch of transactions with bounded concurrency."""
    start_time = time.perf_counter()
    logger.info(
        "POST /classify/batch: tenant=%s, transactions=%d",
        request.tenant,
        len(request.transactions),
    )

    results = await orchestrator.classify_batch(
        [to_transaction(txn) for txn in request.transactions],
        tenant=request.tenant,
    )
    responses = [to_response(result) for result in results]
    stats = _compute_stats(responses)
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        "Batch classification: %d transactions in %dms, methods=%s",
        len(responses),
        elapsed_ms,
        stats.by_method,
    )

    return ClassifyBatchResponse(results=responses, stats=stats, processing_time_ms=elapsed_ms)
