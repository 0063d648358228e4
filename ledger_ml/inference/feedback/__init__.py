from .rule_suggestions import RuleSuggestion, RuleSuggestionAnalyzer, build_suggestions
from .service import BestMatch, FeedbackOutcome, FeedbackService

__all__ = [
    "BestMatch",
    "FeedbackOutcome",
    "FeedbackService",
    "RuleSuggestion",
    "RuleSuggestionAnalyzer",
    "build_suggestions",
]
