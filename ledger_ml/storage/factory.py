"""Repository factory for the classification store."""

from sqlalchemy.ext.asyncio import AsyncSession

from .sqlalchemy.repositories import (
    FeedbackRepository,
    MetricsRepository,
    RuleRepository,
    TaxonomyRepository,
    TransactionRepository,
)


class RepositoryFactory:
    """Factory for creating tenant-scoped repositories from a database session."""

    def __init__(self, session: AsyncSession, tenant: str):
        self._session = session
        self._tenant = tenant

    @property
    def tenant(self) -> str:
        return self._tenant

    @property
    def rules(self) -> RuleRepository:
        """Get classification rule repository."""
        return RuleRepository(self._session, self._tenant)

    @property
    def feedback(self) -> FeedbackRepository:
        """Get classification feedback repository."""
        return FeedbackRepository(self._session, self._tenant)

    @property
    def transactions(self) -> TransactionRepository:
        """Get classified transaction repository."""
        return TransactionRepository(self._session, self._tenant)

    @property
    def taxonomy(self) -> TaxonomyRepository:
        """Get category / subject / detail name repository."""
        return TaxonomyRepository(self._session, self._tenant)

    @property
    def metrics(self) -> MetricsRepository:
        """Get classification metrics repository."""
        return MetricsRepository(self._session, self._tenant)
