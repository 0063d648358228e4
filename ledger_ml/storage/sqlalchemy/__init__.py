"""SQLAlchemy persistence layer."""

from .base import Base
from .engine import build_engine, get_engine, get_session, get_session_maker
from .repositories import (
    FeedbackRepository,
    MetricsRepository,
    RuleRepository,
    TaxonomyRepository,
    TransactionRepository,
)
from .tables import (
    CategoryTable,
    ClassificationFeedbackTable,
    ClassificationMetricTable,
    ClassificationRuleTable,
    DetailTable,
    SubjectTable,
    TransactionTable,
)

__all__ = [
    # Engine
    "build_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    # Tables
    "Base",
    "CategoryTable",
    "ClassificationFeedbackTable",
    "ClassificationMetricTable",
    "ClassificationRuleTable",
    "DetailTable",
    "SubjectTable",
    "TransactionTable",
    # Repositories
    "FeedbackRepository",
    "MetricsRepository",
    "RuleRepository",
    "TaxonomyRepository",
    "TransactionRepository",
]
