"""SQLAlchemy table definitions.

These are thin persistence mappings. Domain logic lives in Pydantic models.
Every table carries the tenant (logical database) it belongs to.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


class CategoryTable(Base):
    __tablename__ = "categories"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class SubjectTable(Base):
    __tablename__ = "subjects"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    category_id: Mapped[UUID] = mapped_column(ForeignKey("categories.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class DetailTable(Base):
    __tablename__ = "details"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    subject_id: Mapped[UUID] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class TransactionTable(Base):
    """Bank-statement transactions (owned by the bookkeeping backend)."""

    __tablename__ = "transactions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    booking_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    payment_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    owner_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending")
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"), nullable=True
    )
    subject_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("subjects.id"), nullable=True
    )
    detail_id: Mapped[UUID | None] = mapped_column(ForeignKey("details.id"), nullable=True)

    __table_args__ = (Index("ix_transactions_tenant_status", "tenant", "status"),)


class ClassificationRuleTable(Base):
    __tablename__ = "classification_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False)
    rule_name: Mapped[str] = mapped_column(String(100), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    description_patterns: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    amount_min: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    amount_max: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    payment_types: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    category_id: Mapped[UUID] = mapped_column(ForeignKey("categories.id"), nullable=False)
    subject_id: Mapped[UUID] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    detail_id: Mapped[UUID | None] = mapped_column(ForeignKey("details.id"), nullable=True)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False, default=95)
    reasoning: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("ix_rules_tenant_priority", "tenant", "priority"),)


class ClassificationFeedbackTable(Base):
    """Append-only record of suggested vs. corrected classifications."""

    __tablename__ = "classification_feedback"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False)
    transaction_id: Mapped[UUID] = mapped_column(nullable=False)
    original_description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    transaction_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    suggested_category_id: Mapped[UUID | None] = mapped_column(nullable=True)
    suggested_subject_id: Mapped[UUID | None] = mapped_column(nullable=True)
    suggested_detail_id: Mapped[UUID | None] = mapped_column(nullable=True)
    suggestion_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    suggestion_method: Mapped[str | None] = mapped_column(String(50), nullable=True)

    corrected_category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id"), nullable=False
    )
    corrected_subject_id: Mapped[UUID] = mapped_column(
        ForeignKey("subjects.id"), nullable=False
    )
    corrected_detail_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("details.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_feedback_tenant_created", "tenant", "created_at"),
        Index("ix_feedback_corrected_category", "corrected_category_id"),
    )


class ClassificationMetricTable(Base):
    __tablename__ = "classification_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant: Mapped[str] = mapped_column(String(50), nullable=False)
    transaction_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    stage_used: Mapped[str] = mapped_column(String(50), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    latency_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    vector_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    amount_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    recency_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    frequency_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    candidates_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cluster_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (Index("ix_metrics_tenant_stage", "tenant", "stage_used", "created_at"),)
