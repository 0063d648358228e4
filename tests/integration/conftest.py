"""Fixtures for API tests.

The TestClient runs the app on its own event loop, so the API tests use a
file database with one connection per session (NullPool) instead of the
shared in-memory engine of the unit tests.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from ledger_ml import __version__
from ledger_ml.api.routes import analytics, classify, feedback, health, indexing, rules
from ledger_ml.config.settings import Settings
from ledger_ml.data_models import Target
from ledger_ml.inference import (
    AnalyticsService,
    ClassificationOrchestrator,
    FeedbackService,
    IndexingService,
    RuleSuggestionAnalyzer,
    SharedInfrastructure,
)
from ledger_ml.inference.shared import ANALYTICS_CACHE, SUGGESTED_RULES_CACHE
from ledger_ml.jobs import JobRunner
from ledger_ml.storage import ResponseCache, get_session
from ledger_ml.storage.sqlalchemy.base import Base
from ledger_ml.storage.sqlalchemy.tables import CategoryTable, SubjectTable


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
def seeded_taxonomy(database_path: Path) -> dict[str, Target]:
    """Create the schema and a small taxonomy for tenant `acme`."""
    engine = create_engine(f"sqlite:///{database_path}")
    Base.metadata.create_all(engine)

    targets = {}
    with Session(engine) as session:
        for category, subject in [("Taxes", "F24"), ("Housing", "Rent")]:
            category_row = CategoryTable(id=uuid4(), tenant="acme", name=category)
            subject_row = SubjectTable(
                id=uuid4(), tenant="acme", category_id=category_row.id, name=subject
            )
            session.add_all([category_row, subject_row])
            targets[subject] = Target(
                category_id=category_row.id,
                category_name=category,
                subject_id=subject_row.id,
                subject_name=subject,
            )
        session.commit()
    engine.dispose()
    return targets


@pytest.fixture
def api_infra(
    database_path: Path,
    seeded_taxonomy: dict[str, Target],
    config,
    embedder,
    vector_index,
) -> SharedInfrastructure:
    engine = create_async_engine(f"sqlite+aiosqlite:///{database_path}", poolclass=NullPool)
    return SharedInfrastructure(
        settings=Settings(_env_file=None, retry_base_delay=0.0, batch_concurrency=1),
        config=config,
        embedder=embedder,
        vector_index=vector_index,
        session_maker=async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
        jobs=JobRunner(max_attempts=1, base_delay=0.0),
        cache=ResponseCache({SUGGESTED_RULES_CACHE: 600, ANALYTICS_CACHE: 300}),
    )


@pytest.fixture
def app(api_infra: SharedInfrastructure) -> FastAPI:
    """App with services on `app.state`, without the production lifespan."""
    app = FastAPI(title="Ledger ML Test", version=__version__)
    app.include_router(health.router, tags=["health"])
    app.include_router(classify.router, tags=["classification"])
    app.include_router(indexing.router, tags=["indexing"])
    app.include_router(rules.router, tags=["rules"])
    app.include_router(feedback.router, tags=["feedback"])
    app.include_router(analytics.router, tags=["analytics"])

    index_service = IndexingService(api_infra)
    app.state.infra = api_infra
    app.state.classification = ClassificationOrchestrator(api_infra)
    app.state.indexing = index_service
    app.state.feedback = FeedbackService(api_infra, index_service)
    app.state.suggestions = RuleSuggestionAnalyzer()
    app.state.analytics = AnalyticsService()

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with api_infra.session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    return app


@pytest.fixture
def test_client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client sharing one event loop across requests."""
    with TestClient(app) as client:
        yield client
