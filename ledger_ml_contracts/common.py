"""Shared models for classification service contracts."""

from uuid import UUID

from pydantic import BaseModel, Field

TENANT_PATTERN = r"^[A-Za-z0-9_\-]{1,50}$"


class TenantScoped(BaseModel):
    """Every request names the logical database it operates on."""

    tenant: str = Field(..., pattern=TENANT_PATTERN)


class TargetRef(BaseModel):
    """A (category, subject, detail) classification target with names."""

    category_id: UUID
    category_name: str
    subject_id: UUID
    subject_name: str
    detail_id: UUID | None = None
    detail_name: str | None = None
