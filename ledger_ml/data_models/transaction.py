"""Transaction domain models."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .taxonomy import Target


class Transaction(BaseModel):
    """Bank-statement line item to classify. Never mutated by the engine."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    description: str
    amount: Decimal
    date: date
    payment_type: str | None = None
    owner_id: str | None = None


class IndexableTransaction(BaseModel):
    """Completed, classified transaction ready for the vector index."""

    id: UUID
    description: str
    amount: Decimal
    transaction_date: date
    payment_type: str | None = None
    target: Target
    # Transactions sharing the same target
    classification_frequency: int = 0
