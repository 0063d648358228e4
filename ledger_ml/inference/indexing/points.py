from datetime import datetime, timezone

from ledger_ml.data_models import IndexableTransaction
from ledger_ml.inference.classification.scoring import amount_bucket, build_embedding_text
from ledger_ml.inference.vector_index import VectorPoint


def embedding_text(txn: IndexableTransaction) -> str:
    return build_embedding_text(txn.description, txn.amount)


def build_point(tenant: str, txn: IndexableTransaction, vector: list[float]) -> VectorPoint:
    """Vector point keyed by transaction id, with a denormalized payload."""
    bucket, _ = amount_bucket(txn.amount)
    target = txn.target
    return VectorPoint(
        id=str(txn.id),
        vector=vector,
        payload={
            "transaction_id": str(txn.id),
            "tenant": tenant,
            "description": txn.description,
            "amount": float(txn.amount),
            "amount_bucket": bucket,
            "transaction_date": txn.transaction_date.isoformat(),
            "payment_type": txn.payment_type,
            "category_id": str(target.category_id),
            "category_name": target.category_name,
            "subject_id": str(target.subject_id),
            "subject_name": target.subject_name,
            "detail_id": str(target.detail_id) if target.detail_id else None,
            "detail_name": target.detail_name,
            "embedding_text": embedding_text(txn),
            "classification_frequency": txn.classification_frequency,
            "indexed_at": datetime.now(tz=timezone.utc).isoformat(),
        },
    )
