"""Test fixtures for the classification service."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ledger_ml.config.settings import Settings
from ledger_ml.config.thresholds import ClassifierConfig
from ledger_ml.data_models import NewFeedback, Target, Transaction
from ledger_ml.inference.embedding import ServiceStatus
from ledger_ml.inference.shared import (
    ANALYTICS_CACHE,
    SUGGESTED_RULES_CACHE,
    SharedInfrastructure,
)
from ledger_ml.jobs import JobRunner
from ledger_ml.storage import RepositoryFactory, ResponseCache
from ledger_ml.storage.sqlalchemy.base import Base
from ledger_ml.storage.sqlalchemy.tables import (
    CategoryTable,
    ClassificationFeedbackTable,
    DetailTable,
    SubjectTable,
    TransactionTable,
)

TENANT = "acme"


@dataclass
class Taxonomy:
    """Seeded targets, by name."""

    taxes_f24: Target
    utilities_edison: Target
    housing_rent: Target
    food_supermarket: Target
    food_supermarket_esselunga: Target


def make_transaction(
    description: str,
    amount: str | Decimal = "-10.00",
    payment_type: str | None = None,
    booking_date: date | None = None,
) -> Transaction:
    return Transaction(
        id=uuid4(),
        description=description,
        amount=Decimal(amount),
        date=booking_date or date(2025, 1, 15),
        payment_type=payment_type,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, retry_base_delay=0.0)


@pytest.fixture
def config() -> ClassifierConfig:
    return ClassifierConfig()


@pytest.fixture
def transaction_factory() -> Callable[..., Transaction]:
    return make_transaction


# -----------------------------------------------------------------------------
# Database
# -----------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared by all sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def repos(session: AsyncSession) -> RepositoryFactory:
    return RepositoryFactory(session, TENANT)


async def _add_target(
    session: AsyncSession,
    category: str,
    subject: str,
    detail: str | None = None,
) -> Target:
    category_row = CategoryTable(id=uuid4(), tenant=TENANT, name=category)
    subject_row = SubjectTable(
        id=uuid4(), tenant=TENANT, category_id=category_row.id, name=subject
    )
    session.add_all([category_row, subject_row])
    detail_row = None
    if detail is not None:
        detail_row = DetailTable(
            id=uuid4(), tenant=TENANT, subject_id=subject_row.id, name=detail
        )
        session.add(detail_row)
    await session.flush()
    return Target(
        category_id=category_row.id,
        category_name=category,
        subject_id=subject_row.id,
        subject_name=subject,
        detail_id=detail_row.id if detail_row else None,
        detail_name=detail,
    )


@pytest_asyncio.fixture
async def taxonomy(session: AsyncSession) -> Taxonomy:
    taxes = await _add_target(session, "Taxes", "F24")
    edison = await _add_target(session, "Utilities", "Edison")
    rent = await _add_target(session, "Housing", "Rent")
    food = await _add_target(session, "Food", "Supermarket")

    esselunga_detail = DetailTable(
        id=uuid4(), tenant=TENANT, subject_id=food.subject_id, name="Esselunga"
    )
    session.add(esselunga_detail)
    await session.commit()

    return Taxonomy(
        taxes_f24=taxes,
        utilities_edison=edison,
        housing_rent=rent,
        food_supermarket=food,
        food_supermarket_esselunga=food.model_copy(
            update={"detail_id": esselunga_detail.id, "detail_name": "Esselunga"}
        ),
    )


AddFeedback = Callable[..., Awaitable[UUID]]


@pytest.fixture
def add_feedback(session: AsyncSession) -> AddFeedback:
    """Insert a feedback row corrected to `target`."""

    async def _add(
        target: Target,
        description: str,
        amount: str | None = "-10.00",
        days_ago: int = 1,
        suggested: Target | None = None,
        confidence: float | None = 60.0,
        method: str | None = "manual",
        transaction_date: date | None = None,
    ) -> UUID:
        created_at = datetime.now(tz=timezone.utc) - timedelta(days=days_ago)
        row = ClassificationFeedbackTable(
            id=uuid4(),
            tenant=TENANT,
            transaction_id=uuid4(),
            original_description=description,
            amount=Decimal(amount) if amount is not None else None,
            transaction_date=transaction_date or created_at.date(),
            suggested_category_id=suggested.category_id if suggested else None,
            suggested_subject_id=suggested.subject_id if suggested else None,
            suggested_detail_id=suggested.detail_id if suggested else None,
            suggestion_confidence=confidence,
            suggestion_method=method,
            corrected_category_id=target.category_id,
            corrected_subject_id=target.subject_id,
            corrected_detail_id=target.detail_id,
            created_at=created_at,
        )
        session.add(row)
        await session.commit()
        return row.id

    return _add


AddTransaction = Callable[..., Awaitable[UUID]]


@pytest.fixture
def add_transaction(session: AsyncSession) -> AddTransaction:
    """Insert a bank transaction, classified to `target` when given."""

    async def _add(
        description: str,
        amount: str = "-10.00",
        target: Target | None = None,
        status: str = "completed",
        booking_date: date | None = None,
    ) -> UUID:
        row = TransactionTable(
            id=uuid4(),
            tenant=TENANT,
            description=description,
            amount=Decimal(amount),
            booking_date=booking_date or date(2025, 1, 15),
            status=status,
            category_id=target.category_id if target else None,
            subject_id=target.subject_id if target else None,
            detail_id=target.detail_id if target else None,
        )
        session.add(row)
        await session.commit()
        return row.id

    return _add


@pytest.fixture
def new_feedback() -> Callable[..., NewFeedback]:
    def _make(suggested: Target | None, corrected: Target, **kwargs) -> NewFeedback:
        return NewFeedback(
            transaction_id=kwargs.pop("transaction_id", uuid4()),
            original_description=kwargs.pop("original_description", "ESSELUNGA MILANO"),
            amount=kwargs.pop("amount", Decimal("-42.10")),
            suggested_category_id=suggested.category_id if suggested else None,
            suggested_subject_id=suggested.subject_id if suggested else None,
            suggested_detail_id=suggested.detail_id if suggested else None,
            corrected_category_id=corrected.category_id,
            corrected_subject_id=corrected.subject_id,
            corrected_detail_id=corrected.detail_id,
            **kwargs,
        )

    return _make


# -----------------------------------------------------------------------------
# External services
# -----------------------------------------------------------------------------


@pytest.fixture
def embedder() -> AsyncMock:
    """Embedding client returning a fixed vector."""
    client = AsyncMock()
    client.embed.return_value = [0.1] * 8
    client.health_check.return_value = ServiceStatus(status="healthy", latency_ms=3)
    return client


@pytest.fixture
def vector_index() -> AsyncMock:
    """Vector index returning no hits by default."""
    index = AsyncMock()
    index.collection_for = lambda tenant: f"transactions_{tenant}"
    index.ensure_collection.side_effect = lambda tenant: f"transactions_{tenant}"
    index.recreate_collection.side_effect = lambda tenant: f"transactions_{tenant}"
    index.search.return_value = []
    index.health_check.return_value = ServiceStatus(status="healthy", latency_ms=2)
    return index


@pytest.fixture
def infra(
    settings: Settings,
    config: ClassifierConfig,
    embedder: AsyncMock,
    vector_index: AsyncMock,
    session_maker: async_sessionmaker[AsyncSession],
) -> SharedInfrastructure:
    return SharedInfrastructure(
        settings=settings,
        config=config,
        embedder=embedder,
        vector_index=vector_index,
        session_maker=session_maker,
        jobs=JobRunner(max_attempts=2, base_delay=0.0),
        cache=ResponseCache({SUGGESTED_RULES_CACHE: 600, ANALYTICS_CACHE: 300}),
    )
