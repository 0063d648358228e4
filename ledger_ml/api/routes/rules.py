"""Classification rule endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from ledger_ml_contracts import (
    AmountStats,
    DeleteRuleResponse,
    RuleCreateRequest,
    RuleListResponse,
    RuleResponse,
    RuleSuggestionResponse,
    RuleUpdateRequest,
    SuggestedRulesResponse,
)

from ledger_ml.api.dependencies import (
    CacheDep,
    InfraDep,
    SessionDep,
    SuggestionAnalyzerDep,
    TenantQuery,
    repositories,
    to_http_error,
)
from ledger_ml.api.routes.classify import to_target_ref
from ledger_ml.data_models import ClassificationRule
from ledger_ml.errors import InvalidRequestError, RuleNotFoundError
from ledger_ml.inference.feedback import RuleSuggestion
from ledger_ml.inference.shared import SUGGESTED_RULES_CACHE
from ledger_ml.storage import ResponseCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rules")


def _to_response(rule: ClassificationRule) -> RuleResponse:
    return RuleResponse.model_validate(rule.model_dump())


def _to_suggestion(suggestion: RuleSuggestion) -> RuleSuggestionResponse:
    return RuleSuggestionResponse(
        pattern=suggestion.pattern,
        suggested_rule_name=suggestion.suggested_rule_name,
        classification=to_target_ref(suggestion.target),
        occurrences=suggestion.occurrences,
        consistency=suggestion.consistency,
        confidence=suggestion.confidence,
        amount=AmountStats(
            avg=suggestion.avg_amount,
            min=suggestion.min_amount,
            max=suggestion.max_amount,
        ),
        first_seen=suggestion.first_seen.isoformat() if suggestion.first_seen else None,
        last_seen=suggestion.last_seen.isoformat() if suggestion.last_seen else None,
        unique_categories=suggestion.unique_categories,
        unique_subjects=suggestion.unique_subjects,
        examples=suggestion.examples,
    )


def _rules_changed(cache: ResponseCache) -> None:
    cache.invalidate(SUGGESTED_RULES_CACHE)


@router.get("", response_model=RuleListResponse)
async def list_rules(
    tenant: TenantQuery,
    session: SessionDep,
    enabled_only: bool = False,
) -> RuleListResponse:
    """List rules, highest priority first."""
    rules = await repositories(session, tenant).rules.list_all(enabled_only=enabled_only)
    return RuleListResponse(rules=[_to_response(r) for r in rules], total=len(rules))


@router.post("", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    request: RuleCreateRequest,
    session: SessionDep,
    infra: InfraDep,
    cache: CacheDep,
) -> RuleResponse:
    """Create a rule. The target must exist for the tenant."""
    repos = repositories(session, request.tenant)
    target = await repos.taxonomy.resolve(
        request.category_id, request.subject_id, request.detail_id
    )
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown category, subject or detail",
        )

    fields = request.model_dump(exclude={"tenant"})
    if fields["confidence"] is None:
        fields["confidence"] = infra.config.thresholds.rule_confidence_min
    rule = await repos.rules.create(**fields)

    _rules_changed(cache)
    logger.info("Created rule %d '%s' (tenant=%s)", rule.id, rule.rule_name, request.tenant)
    return _to_response(rule)


@router.patch("/{rule_id}", response_model=RuleResponse)
async def update_rule(
    rule_id: int,
    request: RuleUpdateRequest,
    session: SessionDep,
    cache: CacheDep,
) -> RuleResponse:
    """Partially update a rule."""
    changes = request.changes()
    try:
        if not changes:
            msg = "No fields to update"
            raise InvalidRequestError(msg)
        rule = await repositories(session, request.tenant).rules.update(rule_id, changes)
        if rule is None:
            raise RuleNotFoundError(rule_id)
    except (InvalidRequestError, RuleNotFoundError) as e:
        raise to_http_error(e) from e

    _rules_changed(cache)
    logger.info("Updated rule %d: %s", rule_id, sorted(changes))
    return _to_response(rule)


@router.delete("/{rule_id}", response_model=DeleteRuleResponse)
async def delete_rule(
    rule_id: int,
    tenant: TenantQuery,
    session: SessionDep,
    cache: CacheDep,
) -> DeleteRuleResponse:
    """Delete a rule."""
    deleted = await repositories(session, tenant).rules.delete(rule_id)
    if not deleted:
        raise to_http_error(RuleNotFoundError(rule_id))

    _rules_changed(cache)
    logger.info("Deleted rule %d (tenant=%s)", rule_id, tenant)
    return DeleteRuleResponse(deleted=True, rule_id=rule_id)


@router.get("/suggested", response_model=SuggestedRulesResponse)
async def suggested_rules(
    tenant: TenantQuery,
    session: SessionDep,
    analyzer: SuggestionAnalyzerDep,
    cache: CacheDep,
    min_occurrences: int = Query(3, ge=1),
    min_consistency: float = Query(0.70, ge=0.0, le=1.0),
) -> SuggestedRulesResponse:
    """Rules worth creating, mined from feedback (cached)."""
    key = (tenant, min_occurrences, min_consistency)
    cached = cache.get(SUGGESTED_RULES_CACHE, key)
    if cached is not None:
        return cached.model_copy(update={"cached": True})

    result = await analyzer.suggest(
        repositories(session, tenant),
        min_occurrences=min_occurrences,
        min_consistency=min_consistency,
    )
    response = SuggestedRulesResponse(
        suggestions=[_to_suggestion(s) for s in result["suggestions"]],
        stats=result["stats"],
    )
    cache.set(SUGGESTED_RULES_CACHE, key, response)
    return response
