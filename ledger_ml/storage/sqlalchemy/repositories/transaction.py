from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_ml.data_models import IndexableTransaction, Target
from ledger_ml.storage.sqlalchemy.tables import (
    CategoryTable,
    DetailTable,
    SubjectTable,
    TransactionTable,
)

COMPLETED_STATUS = "completed"


class TransactionRepository:
    """Read access to classified transactions for vector indexing."""

    def __init__(self, session: AsyncSession, tenant: str):
        self._session = session
        self._tenant = tenant

    def _classified(self) -> list:
        return [
            TransactionTable.tenant == self._tenant,
            TransactionTable.category_id.is_not(None),
            TransactionTable.subject_id.is_not(None),
            TransactionTable.status == COMPLETED_STATUS,
        ]

    def _indexable_select(self) -> Select:
        # How many classified transactions share each target
        frequency = (
            select(
                TransactionTable.category_id,
                TransactionTable.subject_id,
                TransactionTable.detail_id,
                func.count().label("classification_frequency"),
            )
            .where(*self._classified())
            .group_by(
                TransactionTable.category_id,
                TransactionTable.subject_id,
                TransactionTable.detail_id,
            )
            .subquery()
        )

        return (
            select(
                TransactionTable,
                CategoryTable.name.label("category_name"),
                SubjectTable.name.label("subject_name"),
                DetailTable.name.label("detail_name"),
                frequency.c.classification_frequency,
            )
            .join(CategoryTable, CategoryTable.id == TransactionTable.category_id)
            .join(SubjectTable, SubjectTable.id == TransactionTable.subject_id)
            .outerjoin(DetailTable, DetailTable.id == TransactionTable.detail_id)
            .join(
                frequency,
                and_(
                    frequency.c.category_id == TransactionTable.category_id,
                    frequency.c.subject_id == TransactionTable.subject_id,
                    frequency.c.detail_id.is_not_distinct_from(TransactionTable.detail_id),
                ),
            )
            .where(*self._classified())
        )

    async def get_indexable(self, transaction_id: UUID) -> IndexableTransaction | None:
        """A completed, classified transaction, or None."""
        rows = await self.list_indexable([transaction_id])
        return rows[0] if rows else None

    async def list_indexable(
        self, transaction_ids: Sequence[UUID]
    ) -> list[IndexableTransaction]:
        """Eligible transactions among `transaction_ids` (ineligible ones are skipped)."""
        if not transaction_ids:
            return []
        stmt = self._indexable_select().where(TransactionTable.id.in_(list(transaction_ids)))
        return await self._fetch(stmt)

    async def list_recent_indexable(self, limit: int) -> list[IndexableTransaction]:
        """Most recent eligible transactions, newest booking date first."""
        stmt = (
            self._indexable_select()
            .order_by(TransactionTable.booking_date.desc(), TransactionTable.id)
            .limit(limit)
        )
        return await self._fetch(stmt)

    async def _fetch(self, stmt: Select) -> list[IndexableTransaction]:
        result = await self._session.execute(stmt)
        indexable: list[IndexableTransaction] = []
        for row, category_name, subject_name, detail_name, frequency in result.all():
            indexable.append(
                IndexableTransaction(
                    id=row.id,
                    description=row.description,
                    amount=row.amount,
                    transaction_date=row.booking_date,
                    payment_type=row.payment_type,
                    target=Target(
                        category_id=row.category_id,
                        category_name=category_name,
                        subject_id=row.subject_id,
                        subject_name=subject_name,
                        detail_id=row.detail_id if detail_name is not None else None,
                        detail_name=detail_name,
                    ),
                    classification_frequency=frequency or 0,
                )
            )
        return indexable
