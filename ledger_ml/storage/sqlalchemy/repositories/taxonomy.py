from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_ml.data_models import Target, TargetKey
from ledger_ml.storage.sqlalchemy.tables import CategoryTable, DetailTable, SubjectTable


class TaxonomyRepository:
    """Read access to category / subject / detail names."""

    def __init__(self, session: AsyncSession, tenant: str):
        self._session = session
        self._tenant = tenant

    async def resolve(
        self,
        category_id: UUID,
        subject_id: UUID,
        detail_id: UUID | None = None,
    ) -> Target | None:
        """Resolve a triple to names; None if any referenced id is unknown."""
        targets = await self.resolve_many([(category_id, subject_id, detail_id)])
        return targets.get((category_id, subject_id, detail_id))

    async def resolve_many(self, keys: Iterable[TargetKey]) -> dict[TargetKey, Target]:
        """Resolve several triples at once, dropping the ones that do not exist."""
        keys = list(dict.fromkeys(keys))
        if not keys:
            return {}

        categories = await self._names(CategoryTable, {k[0] for k in keys})
        subjects = await self._names(SubjectTable, {k[1] for k in keys})
        details = await self._names(DetailTable, {k[2] for k in keys if k[2] is not None})

        resolved: dict[TargetKey, Target] = {}
        for category_id, subject_id, detail_id in keys:
            if category_id not in categories or subject_id not in subjects:
                continue
            if detail_id is not None and detail_id not in details:
                continue
            resolved[(category_id, subject_id, detail_id)] = Target(
                category_id=category_id,
                category_name=categories[category_id],
                subject_id=subject_id,
                subject_name=subjects[subject_id],
                detail_id=detail_id,
                detail_name=details.get(detail_id) if detail_id else None,
            )
        return resolved

    async def _names(
        self,
        table: type[CategoryTable] | type[SubjectTable] | type[DetailTable],
        ids: set[UUID],
    ) -> dict[UUID, str]:
        if not ids:
            return {}
        stmt = select(table.id, table.name).where(
            table.tenant == self._tenant,
            table.id.in_(ids),
        )
        result = await self._session.execute(stmt)
        return {row_id: name for row_id, name in result.all()}
