from typing import Any

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_ml.data_models import ClassificationRule
from ledger_ml.storage.sqlalchemy.tables import ClassificationRuleTable

# Columns a rule update may touch
UPDATABLE_FIELDS = frozenset(
    {
        "rule_name",
        "enabled",
        "priority",
        "description_patterns",
        "amount_min",
        "amount_max",
        "payment_types",
        "confidence",
        "reasoning",
    }
)


class RuleRepository:
    """Repository for operator-defined classification rules."""

    def __init__(self, session: AsyncSession, tenant: str):
        self._session = session
        self._tenant = tenant

    async def list_enabled(self) -> list[ClassificationRule]:
        """Enabled rules, highest priority first (ties by creation order)."""
        return await self.list_all(enabled_only=True)

    async def list_all(self, enabled_only: bool = False) -> list[ClassificationRule]:
        stmt = select(ClassificationRuleTable).where(
            ClassificationRuleTable.tenant == self._tenant
        )
        if enabled_only:
            stmt = stmt.where(ClassificationRuleTable.enabled.is_(True))
        stmt = stmt.order_by(
            ClassificationRuleTable.priority.desc(), ClassificationRuleTable.id
        )
        result = await self._session.execute(stmt)
        return [self._to_model(row) for row in result.scalars().all()]

    async def get(self, rule_id: int) -> ClassificationRule | None:
        row = await self._get_row(rule_id)
        return self._to_model(row) if row else None

    async def create(self, **fields: Any) -> ClassificationRule:
        """Insert a rule; `fields` are column values."""
        row = ClassificationRuleTable(tenant=self._tenant, **fields)
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return self._to_model(row)

    async def update(self, rule_id: int, changes: dict[str, Any]) -> ClassificationRule | None:
        """Apply a partial update; unknown keys are ignored. None if absent."""
        row = await self._get_row(rule_id)
        if row is None:
            return None

        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(row, key, value)
        await self._session.commit()
        await self._session.refresh(row)
        return self._to_model(row)

    async def delete(self, rule_id: int) -> bool:
        stmt = delete(ClassificationRuleTable).where(
            ClassificationRuleTable.tenant == self._tenant,
            ClassificationRuleTable.id == rule_id,
        )
        result = await self._session.execute(stmt)
        await self._session.commit()
        return result.rowcount > 0

    async def counts(self) -> dict[str, int]:
        """Total / active / disabled rule counts."""
        stmt = select(
            func.count(),
            func.sum(case((ClassificationRuleTable.enabled.is_(True), 1), else_=0)),
        ).where(ClassificationRuleTable.tenant == self._tenant)
        total, active = (await self._session.execute(stmt)).one()
        active = active or 0
        return {
            "total_rules": total,
            "active_rules": active,
            "disabled_rules": total - active,
        }

    async def _get_row(self, rule_id: int) -> ClassificationRuleTable | None:
        stmt = select(ClassificationRuleTable).where(
            ClassificationRuleTable.tenant == self._tenant,
            ClassificationRuleTable.id == rule_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_model(row: ClassificationRuleTable) -> ClassificationRule:
        return ClassificationRule(
            id=row.id,
            rule_name=row.rule_name,
            priority=row.priority,
            enabled=row.enabled,
            description_patterns=list(row.description_patterns or []),
            amount_min=row.amount_min,
            amount_max=row.amount_max,
            payment_types=list(row.payment_types or []),
            category_id=row.category_id,
            subject_id=row.subject_id,
            detail_id=row.detail_id,
            confidence=row.confidence,
            reasoning=row.reasoning,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
