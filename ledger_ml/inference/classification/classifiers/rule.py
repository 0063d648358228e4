from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import TYPE_CHECKING

from ledger_ml.data_models import ClassificationRule, Transaction

from ..result import ClassificationMethod, StageMatch
from .base import Stage

if TYPE_CHECKING:
    from ..context import ClassificationContext

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Case-insensitive regex, or None when the pattern is invalid."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning("Skipping invalid rule pattern %r: %s", pattern, e)
        return None


def rule_matches(rule: ClassificationRule, transaction: Transaction) -> bool:
    """All configured conditions of `rule` hold for `transaction`."""
    if rule.description_patterns:
        compiled = [compile_pattern(p) for p in rule.description_patterns]
        if not any(c.search(transaction.description) for c in compiled if c is not None):
            return False

    amount = abs(transaction.amount)
    if rule.amount_min is not None and amount < rule.amount_min:
        return False
    if rule.amount_max is not None and amount > rule.amount_max:
        return False

    if rule.payment_types and transaction.payment_type not in rule.payment_types:
        return False

    return True


class RuleClassifier(Stage):
    """Stage 1: first enabled rule (by descending priority) that matches."""

    name = "rule"

    async def classify(self, ctx: ClassificationContext) -> StageMatch | None:
        rules = await ctx.repos.rules.list_enabled()
        if not rules:
            logger.debug("Rule stage: no enabled rules")
            return None

        for rule in rules:
            if not rule_matches(rule, ctx.transaction):
                continue

            target = await ctx.repos.taxonomy.resolve(*rule.target_key)
            if target is None:
                logger.warning(
                    "Rule %d (%s) targets a missing category/subject/detail, skipping",
                    rule.id,
                    rule.rule_name,
                )
                continue

            logger.info("Rule stage: '%s' matched %s", rule.rule_name, ctx.transaction.id)
            return StageMatch(
                target=target,
                confidence=rule.confidence,
                method=ClassificationMethod.RULE,
                reasoning=rule.reasoning or f"Matched rule: {rule.rule_name}",
                debug={
                    "rule_id": rule.id,
                    "rule_name": rule.rule_name,
                    "priority": rule.priority,
                },
            )

        logger.debug("Rule stage: none of %d rules matched", len(rules))
        return None
