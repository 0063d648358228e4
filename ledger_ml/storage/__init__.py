"""Classification storage layer.

This module provides:
- `sqlalchemy`: PostgreSQL persistence layer (tables, repositories)
- `filters`: typed feedback filters
- `cache`: TTL cache for expensive read endpoints

Note: Domain models are in `ledger_ml.data_models`.
"""

from .cache import ResponseCache
from .factory import RepositoryFactory
from .filters import FeedbackFilter
from .sqlalchemy import (
    Base,
    FeedbackRepository,
    MetricsRepository,
    RuleRepository,
    TaxonomyRepository,
    TransactionRepository,
    build_engine,
    get_engine,
    get_session,
    get_session_maker,
)

__all__ = [
    "Base",
    "FeedbackFilter",
    "ResponseCache",
    # Database
    "build_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    # Repositories
    "FeedbackRepository",
    "MetricsRepository",
    "RepositoryFactory",
    "RuleRepository",
    "TaxonomyRepository",
    "TransactionRepository",
]
