"""Database repositories for the classification store."""

from .feedback import FeedbackRepository
from .metrics import MetricsRepository
from .rule import RuleRepository
from .taxonomy import TaxonomyRepository
from .transaction import TransactionRepository

__all__ = [
    "FeedbackRepository",
    "MetricsRepository",
    "RuleRepository",
    "TaxonomyRepository",
    "TransactionRepository",
]
