from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_ml.data_models import ClassificationMetric
from ledger_ml.storage.sqlalchemy.tables import ClassificationMetricTable


class MetricsRepository:
    """Repository for per-classification metrics."""

    def __init__(self, session: AsyncSession, tenant: str):
        self._session = session
        self._tenant = tenant

    async def add(self, metric: ClassificationMetric) -> None:
        row = ClassificationMetricTable(
            tenant=self._tenant,
            **metric.model_dump(exclude={"created_at"}),
            created_at=metric.created_at or datetime.now(tz=timezone.utc),
        )
        self._session.add(row)
        await self._session.commit()

    async def list_since(self, since: datetime) -> list[ClassificationMetric]:
        stmt = select(ClassificationMetricTable).where(
            ClassificationMetricTable.tenant == self._tenant,
            ClassificationMetricTable.created_at >= since,
        )
        result = await self._session.execute(stmt)
        return [
            ClassificationMetric(
                transaction_id=row.transaction_id,
                stage_used=row.stage_used,
                confidence=row.confidence,
                latency_ms=row.latency_ms or 0,
                vector_score=row.vector_score,
                amount_score=row.amount_score,
                recency_score=row.recency_score,
                frequency_score=row.frequency_score,
                candidates_count=row.candidates_count,
                cluster_count=row.cluster_count,
                created_at=row.created_at,
            )
            for row in result.scalars().all()
        ]
