from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_ml.data_models import FeedbackEntry, NewFeedback, Target, TargetKey
from ledger_ml.storage.filters import FeedbackFilter
from ledger_ml.storage.sqlalchemy.tables import (
    CategoryTable,
    ClassificationFeedbackTable,
    DetailTable,
    SubjectTable,
)

Feedback = ClassificationFeedbackTable


class FeedbackRepository:
    """Repository for classification feedback (tenant scoped)."""

    def __init__(self, session: AsyncSession, tenant: str):
        self._session = session
        self._tenant = tenant

    async def add(self, feedback: NewFeedback, created_at: datetime | None = None) -> UUID:
        """Append a feedback record and return its id."""
        row = Feedback(
            tenant=self._tenant,
            created_at=created_at or datetime.now(tz=timezone.utc),
            **feedback.model_dump(),
        )
        self._session.add(row)
        await self._session.commit()
        return row.id

    async def find(
        self,
        feedback_filter: FeedbackFilter | None = None,
        limit: int | None = None,
    ) -> list[FeedbackEntry]:
        """Feedback joined with the corrected target names, newest first.

        Rows whose corrected category or subject no longer exists are left out.
        """
        feedback_filter = feedback_filter or FeedbackFilter()
        stmt = (
            select(
                Feedback,
                CategoryTable.name.label("category_name"),
                SubjectTable.name.label("subject_name"),
                DetailTable.name.label("detail_name"),
            )
            .join(CategoryTable, CategoryTable.id == Feedback.corrected_category_id)
            .join(SubjectTable, SubjectTable.id == Feedback.corrected_subject_id)
            .outerjoin(DetailTable, DetailTable.id == Feedback.corrected_detail_id)
            .where(*feedback_filter.predicates(self._tenant))
            .order_by(Feedback.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [
            self._to_entry(row, category_name, subject_name, detail_name)
            for row, category_name, subject_name, detail_name in result.all()
        ]

    async def count_by_target(self) -> dict[TargetKey, int]:
        """All-time feedback count per corrected (category, subject, detail)."""
        stmt = (
            select(
                Feedback.corrected_category_id,
                Feedback.corrected_subject_id,
                Feedback.corrected_detail_id,
                func.count(),
            )
            .where(Feedback.tenant == self._tenant)
            .group_by(
                Feedback.corrected_category_id,
                Feedback.corrected_subject_id,
                Feedback.corrected_detail_id,
            )
        )
        result = await self._session.execute(stmt)
        return {
            (category_id, subject_id, detail_id): count
            for category_id, subject_id, detail_id, count in result.all()
        }

    async def stats(self) -> dict[str, Any]:
        """Corpus-level counters for monitoring."""
        stmt = select(
            func.count().label("total_feedbacks"),
            func.count(func.distinct(Feedback.transaction_id)).label("unique_transactions"),
            func.avg(Feedback.suggestion_confidence).label("avg_original_confidence"),
            func.sum(case((Feedback.suggestion_confidence >= 90, 1), else_=0)).label(
                "high_confidence_corrections"
            ),
            func.sum(case((Feedback.suggestion_confidence < 70, 1), else_=0)).label(
                "low_confidence_corrections"
            ),
            func.count(func.distinct(Feedback.corrected_category_id)).label(
                "categories_involved"
            ),
            func.count(func.distinct(Feedback.corrected_subject_id)).label(
                "subjects_involved"
            ),
            func.min(Feedback.created_at).label("first_feedback_at"),
            func.max(Feedback.created_at).label("last_feedback_at"),
        ).where(Feedback.tenant == self._tenant)

        row = (await self._session.execute(stmt)).one()
        stats = dict(row._mapping)
        for key in ("high_confidence_corrections", "low_confidence_corrections"):
            stats[key] = stats[key] or 0
        return stats

    @staticmethod
    def _to_entry(
        row: ClassificationFeedbackTable,
        category_name: str,
        subject_name: str,
        detail_name: str | None,
    ) -> FeedbackEntry:
        return FeedbackEntry(
            id=row.id,
            transaction_id=row.transaction_id,
            original_description=row.original_description,
            amount=row.amount,
            transaction_date=row.transaction_date,
            suggested_category_id=row.suggested_category_id,
            suggested_subject_id=row.suggested_subject_id,
            suggested_detail_id=row.suggested_detail_id,
            suggestion_confidence=row.suggestion_confidence,
            suggestion_method=row.suggestion_method,
            target=Target(
                category_id=row.corrected_category_id,
                category_name=category_name,
                subject_id=row.corrected_subject_id,
                subject_name=subject_name,
                detail_id=row.corrected_detail_id if detail_name is not None else None,
                detail_name=detail_name,
            ),
            created_at=row.created_at,
        )
