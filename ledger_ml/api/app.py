"""FastAPI application with lifespan management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from ledger_ml import __version__
from ledger_ml.config.settings import get_settings
from ledger_ml.inference import (
    AnalyticsService,
    ClassificationOrchestrator,
    FeedbackService,
    IndexingService,
    RuleSuggestionAnalyzer,
    SharedInfrastructure,
)
from ledger_ml.storage import Base, get_engine


def configure_logging() -> None:
    """Configure logging for the classification service."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Set level for our package specifically
    logging.getLogger("ledger_ml").setLevel(log_level)

    # Quiet noisy third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


configure_logging()
logger = logging.getLogger(__name__)


async def _init_database(engine: AsyncEngine) -> None:
    """Initialize database tables."""
    logger.info("Initializing database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


def _log_settings() -> None:
    """Log current settings for debugging."""
    settings = get_settings()

    logger.info("=" * 60)
    logger.info("Ledger ML Classification Service Configuration")
    logger.info("=" * 60)
    logger.info("  Log level: %s", settings.log_level)
    logger.info("  Database: %s", settings.database_url.split("@")[-1])  # Hide password
    logger.info("  Vector index: %s (prefix=%s)", settings.qdrant_url, settings.collection_prefix)
    logger.info("  Embeddings:")
    logger.info("    URL: %s", settings.ollama_url)
    logger.info("    Model: %s (dim=%d)", settings.embedding_model, settings.vector_size)
    logger.info(
        "    Retry: %d attempts, base delay %.1fs",
        settings.retry_attempts,
        settings.retry_base_delay,
    )
    logger.info("  Thresholds:")
    logger.info("    Exact match: %d", settings.exact_confidence_min)
    logger.info(
        "    Semantic: %d (vector >= %.2f)",
        settings.semantic_confidence_min,
        settings.vector_similarity_min,
    )
    logger.info("    Entity match: %d", settings.entity_confidence_min)
    logger.info("  Batch concurrency: %d", settings.batch_concurrency)
    logger.info("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build shared clients and services at startup, close them at shutdown."""
    settings = get_settings()

    # Log configuration
    _log_settings()

    # Initialize database
    engine = get_engine()
    await _init_database(engine)
    app.state.db_engine = engine

    infra = SharedInfrastructure.from_settings(settings)
    indexing = IndexingService(infra)

    app.state.infra = infra
    app.state.classification = ClassificationOrchestrator(infra)
    app.state.indexing = indexing
    app.state.feedback = FeedbackService(infra, indexing)
    app.state.suggestions = RuleSuggestionAnalyzer()
    app.state.analytics = AnalyticsService()

    logger.info("Classification service ready")
    yield

    logger.info("Shutting down")
    await infra.close()
    for name in ("classification", "indexing", "feedback", "suggestions", "analytics", "infra"):
        delattr(app.state, name)

    # Close database connections
    await app.state.db_engine.dispose()
    del app.state.db_engine


def create_app() -> FastAPI:
    """Create FastAPI application."""
    from ledger_ml.api.routes import analytics, classify, feedback, health, indexing, rules

    app = FastAPI(
        title="Ledger ML Classification Service",
        description="Cascading transaction classification service",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(classify.router, tags=["classification"])
    app.include_router(indexing.router, tags=["indexing"])
    app.include_router(rules.router, tags=["rules"])
    app.include_router(feedback.router, tags=["feedback"])
    app.include_router(analytics.router, tags=["analytics"])

    return app


# For uvicorn
app = create_app()
