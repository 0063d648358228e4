"""Pydantic domain models shared by the engine and storage."""

from .feedback import FeedbackEntry, NewFeedback
from .metrics import ClassificationMetric
from .rule import ClassificationRule
from .taxonomy import Target, TargetKey
from .transaction import IndexableTransaction, Transaction

__all__ = [
    "ClassificationMetric",
    "ClassificationRule",
    "FeedbackEntry",
    "IndexableTransaction",
    "NewFeedback",
    "Target",
    "TargetKey",
    "Transaction",
]
