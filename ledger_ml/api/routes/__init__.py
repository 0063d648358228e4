"""API route handlers."""

from ledger_ml.api.routes import analytics, classify, feedback, health, indexing, rules

__all__ = ["analytics", "classify", "feedback", "health", "indexing", "rules"]
