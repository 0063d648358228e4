"""Classification service API contracts.

This package defines the API contract between the bookkeeping backend and
the classification service.
"""

from ledger_ml_contracts.analytics import AnalyticsResponse, MetricsSummaryResponse
from ledger_ml_contracts.classify import (
    ClassificationMethod,
    ClassificationResponse,
    ClassificationStats,
    ClassifyBatchRequest,
    ClassifyBatchResponse,
    ClassifyRequest,
    SimilarTransaction,
    Suggestion,
    TransactionInput,
)
from ledger_ml_contracts.common import TargetRef, TenantScoped
from ledger_ml_contracts.feedback import (
    BestMatch,
    BestMatchRequest,
    BestMatchResponse,
    FeedbackRequest,
    FeedbackResponse,
    FeedbackStatsResponse,
    LearningDataItem,
    LearningDataRequest,
    LearningDataResponse,
)
from ledger_ml_contracts.health import HealthResponse, ServiceHealth
from ledger_ml_contracts.indexing import (
    IndexBatchRequest,
    IndexResponse,
    IndexTransactionRequest,
    ReindexRequest,
)
from ledger_ml_contracts.rules import (
    AmountStats,
    DeleteRuleResponse,
    RuleCreateRequest,
    RuleListResponse,
    RuleResponse,
    RuleSuggestionResponse,
    RuleUpdateRequest,
    SuggestedRulesResponse,
)

__all__ = [
    # Common
    "TargetRef",
    "TenantScoped",
    # Classification
    "TransactionInput",
    "ClassifyRequest",
    "ClassifyBatchRequest",
    "ClassificationMethod",
    "ClassificationResponse",
    "ClassificationStats",
    "ClassifyBatchResponse",
    "SimilarTransaction",
    "Suggestion",
    # Indexing
    "IndexTransactionRequest",
    "IndexBatchRequest",
    "ReindexRequest",
    "IndexResponse",
    # Rules
    "RuleCreateRequest",
    "RuleUpdateRequest",
    "RuleResponse",
    "RuleListResponse",
    "DeleteRuleResponse",
    "AmountStats",
    "RuleSuggestionResponse",
    "SuggestedRulesResponse",
    # Feedback
    "FeedbackRequest",
    "FeedbackResponse",
    "FeedbackStatsResponse",
    "LearningDataRequest",
    "LearningDataItem",
    "LearningDataResponse",
    "BestMatchRequest",
    "BestMatch",
    "BestMatchResponse",
    # Analytics
    "AnalyticsResponse",
    "MetricsSummaryResponse",
    # Health
    "HealthResponse",
    "ServiceHealth",
]
