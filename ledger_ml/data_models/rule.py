"""Classification rule domain model."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class ClassificationRule(BaseModel):
    """Operator-defined pattern rule. Read-only to the classification stages."""

    id: int
    rule_name: str
    priority: int = 50
    enabled: bool = True
    description_patterns: list[str] = Field(default_factory=list)
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None
    payment_types: list[str] = Field(default_factory=list)
    category_id: UUID
    subject_id: UUID
    detail_id: UUID | None = None
    confidence: int = 95
    reasoning: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def target_key(self) -> tuple[UUID, UUID, UUID | None]:
        return (self.category_id, self.subject_id, self.detail_id)
