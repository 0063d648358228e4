"""Rule suggestions mined from user feedback.

Feedback records are grouped by a coarse description pattern. Groups that
recur often enough and agree on one target become candidate rules, unless an
enabled rule already covers the same pattern and target.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ledger_ml.data_models import ClassificationRule, FeedbackEntry, Target
from ledger_ml.inference.classification.preprocessing import suggestion_pattern
from ledger_ml.storage.filters import FeedbackFilter

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 5
MIN_PATTERN_LENGTH = 4
MAX_SUGGESTIONS = 50
MAX_EXAMPLES = 3
RULE_NAME_PATTERN_LENGTH = 30


@dataclass
class RuleSuggestion:
    pattern: str
    suggested_rule_name: str
    target: Target
    occurrences: int
    consistency: float
    confidence: int
    avg_amount: float | None
    min_amount: float | None
    max_amount: float | None
    first_seen: date | None
    last_seen: date | None
    unique_categories: int
    unique_subjects: int
    examples: list[str] = field(default_factory=list)


def _covered_by_rule(pattern: str, target: Target, rules: list[ClassificationRule]) -> bool:
    for rule in rules:
        if rule.target_key != target.key:
            continue
        for rule_pattern in rule.description_patterns:
            upper = rule_pattern.upper()
            if upper and (upper in pattern or pattern in upper):
                return True
    return False


def _analyze_group(pattern: str, entries: list[FeedbackEntry]) -> RuleSuggestion:
    targets = Counter(entry.target_key for entry in entries)
    mode_key, agreeing = targets.most_common(1)[0]
    target = next(entry.target for entry in entries if entry.target_key == mode_key)

    amounts = [abs(float(e.amount)) for e in entries if e.amount is not None]
    dates = [e.transaction_date for e in entries if e.transaction_date is not None]
    newest_first = sorted(entries, key=lambda e: e.created_at, reverse=True)
    consistency = agreeing / len(entries)

    return RuleSuggestion(
        pattern=pattern,
        suggested_rule_name=f"Auto: {pattern[:RULE_NAME_PATTERN_LENGTH].strip()}...",
        target=target,
        occurrences=len(entries),
        consistency=round(consistency, 4),
        confidence=round(consistency * 100),
        avg_amount=round(sum(amounts) / len(amounts), 2) if amounts else None,
        min_amount=min(amounts) if amounts else None,
        max_amount=max(amounts) if amounts else None,
        first_seen=min(dates) if dates else None,
        last_seen=max(dates) if dates else None,
        unique_categories=len({e.target.category_id for e in entries}),
        unique_subjects=len({e.target.subject_id for e in entries}),
        examples=[e.original_description for e in newest_first[:MAX_EXAMPLES]],
    )


def build_suggestions(
    entries: list[FeedbackEntry],
    rules: list[ClassificationRule],
    min_occurrences: int = 3,
    min_consistency: float = 0.70,
    limit: int = MAX_SUGGESTIONS,
) -> list[RuleSuggestion]:
    """Pure aggregation: feedback + enabled rules -> ranked suggestions."""
    groups: dict[str, list[FeedbackEntry]] = defaultdict(list)
    for entry in entries:
        if len(entry.original_description) <= MIN_DESCRIPTION_LENGTH:
            continue
        pattern = suggestion_pattern(entry.original_description)
        if len(pattern) < MIN_PATTERN_LENGTH:
            continue
        groups[pattern].append(entry)

    suggestions = []
    for pattern, members in groups.items():
        if len(members) < min_occurrences:
            continue
        suggestion = _analyze_group(pattern, members)
        if suggestion.consistency < min_consistency:
            continue
        if _covered_by_rule(pattern, suggestion.target, rules):
            logger.debug("Suggestion %r already covered by an enabled rule", pattern)
            continue
        suggestions.append(suggestion)

    suggestions.sort(key=lambda s: (s.occurrences, s.consistency), reverse=True)
    return suggestions[:limit]


class RuleSuggestionAnalyzer:
    """Loads feedback and rules for a tenant and builds rule suggestions."""

    async def suggest(
        self,
        repos,
        min_occurrences: int = 3,
        min_consistency: float = 0.70,
    ) -> dict[str, Any]:
        entries = await repos.feedback.find(
            FeedbackFilter(min_description_length=MIN_DESCRIPTION_LENGTH)
        )
        rules = await repos.rules.list_enabled()
        suggestions = build_suggestions(entries, rules, min_occurrences, min_consistency)

        created = [e.created_at for e in entries]
        stats = {
            "total_suggestions": len(suggestions),
            "total_feedback_analyzed": len(entries),
            "accepted_feedback": sum(1 for e in entries if e.accepted_exactly),
            "unique_categories": len({e.target.category_id for e in entries}),
            "unique_subjects": len({e.target.subject_id for e in entries}),
            "date_range": {
                "from": min(created).isoformat() if created else None,
                "to": max(created).isoformat() if created else None,
            },
            "filters": {
                "min_occurrences": min_occurrences,
                "min_consistency": min_consistency,
            },
        }
        logger.info(
            "Rule suggestions: %d from %d feedback records",
            len(suggestions),
            len(entries),
        )
        return {"suggestions": suggestions, "stats": stats}
