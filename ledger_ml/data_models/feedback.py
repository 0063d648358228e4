"""Classification feedback domain models."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from .taxonomy import Target, TargetKey


class NewFeedback(BaseModel):
    """A user decision on a suggested classification."""

    transaction_id: UUID
    original_description: str
    amount: Decimal | None = None
    transaction_date: date | None = None
    suggested_category_id: UUID | None = None
    suggested_subject_id: UUID | None = None
    suggested_detail_id: UUID | None = None
    suggestion_confidence: float | None = None
    suggestion_method: str | None = None
    corrected_category_id: UUID
    corrected_subject_id: UUID
    corrected_detail_id: UUID | None = None
    created_by: str | None = None

    @property
    def is_correction(self) -> bool:
        """False when the user kept the suggestion unchanged."""
        return (
            self.suggested_category_id,
            self.suggested_subject_id,
            self.suggested_detail_id,
        ) != (
            self.corrected_category_id,
            self.corrected_subject_id,
            self.corrected_detail_id,
        )


class FeedbackEntry(BaseModel):
    """Stored feedback joined with the names of the corrected target."""

    id: UUID
    transaction_id: UUID
    original_description: str
    amount: Decimal | None = None
    transaction_date: date | None = None
    suggested_category_id: UUID | None = None
    suggested_subject_id: UUID | None = None
    suggested_detail_id: UUID | None = None
    suggestion_confidence: float | None = None
    suggestion_method: str | None = None
    target: Target
    created_at: datetime

    @property
    def target_key(self) -> TargetKey:
        return self.target.key

    @property
    def accepted(self) -> bool:
        """Corrected category and subject equal the suggestion."""
        return (
            self.suggested_category_id == self.target.category_id
            and self.suggested_subject_id == self.target.subject_id
        )

    @property
    def accepted_exactly(self) -> bool:
        """Like `accepted`, detail included."""
        return self.accepted and self.suggested_detail_id == self.target.detail_id
