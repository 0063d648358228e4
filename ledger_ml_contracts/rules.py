"""Classification rule management contracts."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .common import TargetRef, TenantScoped


class RuleCreateRequest(TenantScoped):
    rule_name: str = Field(..., min_length=1, max_length=100)
    priority: int = 50
    enabled: bool = True
    description_patterns: list[str] = Field(default_factory=list)
    amount_min: Decimal | None = Field(None, ge=0)
    amount_max: Decimal | None = Field(None, ge=0)
    payment_types: list[str] = Field(default_factory=list)
    category_id: UUID
    subject_id: UUID
    detail_id: UUID | None = None
    confidence: int | None = Field(None, ge=0, le=100)
    reasoning: str | None = None
    created_by: str | None = None


class RuleUpdateRequest(TenantScoped):
    """Partial update; only fields that are set are applied."""

    rule_name: str | None = Field(None, min_length=1, max_length=100)
    enabled: bool | None = None
    priority: int | None = None
    description_patterns: list[str] | None = None
    amount_min: Decimal | None = Field(None, ge=0)
    amount_max: Decimal | None = Field(None, ge=0)
    payment_types: list[str] | None = None
    confidence: int | None = Field(None, ge=0, le=100)
    reasoning: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"tenant"})


class RuleResponse(BaseModel):
    id: int
    rule_name: str
    priority: int
    enabled: bool
    description_patterns: list[str]
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None
    payment_types: list[str]
    category_id: UUID
    subject_id: UUID
    detail_id: UUID | None = None
    confidence: int
    reasoning: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RuleListResponse(BaseModel):
    rules: list[RuleResponse]
    total: int


class DeleteRuleResponse(BaseModel):
    deleted: bool
    rule_id: int


class AmountStats(BaseModel):
    avg: float | None = None
    min: float | None = None
    max: float | None = None


class RuleSuggestionResponse(BaseModel):
    pattern: str
    suggested_rule_name: str
    classification: TargetRef
    occurrences: int
    consistency: float
    confidence: int
    amount: AmountStats
    first_seen: str | None = None
    last_seen: str | None = None
    unique_categories: int
    unique_subjects: int
    examples: list[str]


class SuggestedRulesResponse(BaseModel):
    suggestions: list[RuleSuggestionResponse]
    stats: dict[str, Any]
    cached: bool = False
