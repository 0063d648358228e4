"""Classification cascade module.

Exports:
- Orchestrator: ClassificationOrchestrator for production API use
- Stages: individual stages, usable on their own in tests
- Context: ClassificationContext for data flow
- Result: ClassificationResult and its parts
"""

from .classifiers import EntityMatcher, HistoricalMatcher, RuleClassifier, SemanticMatcher
from .context import ClassificationContext
from .orchestrator import ClassificationOrchestrator
from .result import (
    ClassificationMethod,
    ClassificationResult,
    SemanticOutcome,
    SimilarTransaction,
    StageMatch,
    Suggestion,
)

__all__ = [
    # Orchestrator
    "ClassificationOrchestrator",
    # Stages
    "RuleClassifier",
    "HistoricalMatcher",
    "SemanticMatcher",
    "EntityMatcher",
    # Context
    "ClassificationContext",
    # Result
    "ClassificationMethod",
    "ClassificationResult",
    "SemanticOutcome",
    "SimilarTransaction",
    "StageMatch",
    "Suggestion",
]
