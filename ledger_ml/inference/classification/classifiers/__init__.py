"""Classification stages, in cascade order."""

from .entity import EntityMatcher
from .historical import HistoricalMatcher
from .rule import RuleClassifier
from .semantic import SemanticMatcher

__all__ = ["RuleClassifier", "HistoricalMatcher", "SemanticMatcher", "EntityMatcher"]
