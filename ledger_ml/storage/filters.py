"""Typed feedback filters compiled into parameterized SQLAlchemy predicates."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, func, or_

from .sqlalchemy.tables import ClassificationFeedbackTable as Feedback


@dataclass(frozen=True)
class FeedbackFilter:
    """Optional constraints on feedback rows; unset fields do not filter."""

    since: datetime | None = None
    until: datetime | None = None
    methods: Sequence[str] = field(default_factory=tuple)
    category_id: UUID | None = None
    subject_id: UUID | None = None
    # Any of these lowercase fragments appears in the description
    description_contains_any: Sequence[str] = field(default_factory=tuple)
    min_description_length: int | None = None
    with_amount: bool = False

    def predicates(self, tenant: str) -> list[ColumnElement[bool]]:
        """Build the WHERE clauses for this filter, tenant scoped."""
        clauses: list[ColumnElement[bool]] = [Feedback.tenant == tenant]

        if self.since is not None:
            clauses.append(Feedback.created_at >= self.since)
        if self.until is not None:
            clauses.append(Feedback.created_at < self.until)
        if self.methods:
            clauses.append(Feedback.suggestion_method.in_(list(self.methods)))
        if self.category_id is not None:
            clauses.append(Feedback.corrected_category_id == self.category_id)
        if self.subject_id is not None:
            clauses.append(Feedback.corrected_subject_id == self.subject_id)
        if self.description_contains_any:
            lowered = func.lower(Feedback.original_description)
            clauses.append(
                or_(
                    *(
                        lowered.contains(fragment, autoescape=True)
                        for fragment in self.description_contains_any
                    )
                )
            )
        if self.min_description_length is not None:
            clauses.append(
                func.length(Feedback.original_description) > self.min_description_length
            )
        if self.with_amount:
            clauses.append(Feedback.amount.is_not(None))

        return clauses
