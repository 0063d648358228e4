from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ledger_ml.data_models import Transaction

from .preprocessing import normalize_description

if TYPE_CHECKING:
    from ledger_ml.storage import RepositoryFactory


@dataclass
class ClassificationContext:
    """One transaction flowing through the stage cascade."""

    tenant: str
    transaction: Transaction
    repos: RepositoryFactory
    now: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    # Derived once, shared by the stages
    description_lower: str = field(init=False)
    normalized_description: str = field(init=False)

    def __post_init__(self) -> None:
        self.description_lower = self.transaction.description.lower()
        self.normalized_description = normalize_description(self.transaction.description)

    @property
    def amount(self) -> float:
        return float(self.transaction.amount)
