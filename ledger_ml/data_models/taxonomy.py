"""Classification target (category / subject / detail) domain model."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

TargetKey = tuple[UUID, UUID, UUID | None]


class Target(BaseModel):
    """A resolved (category, subject, detail) triple; detail is optional."""

    model_config = ConfigDict(frozen=True)

    category_id: UUID
    category_name: str
    subject_id: UUID
    subject_name: str
    detail_id: UUID | None = None
    detail_name: str | None = None

    @property
    def key(self) -> TargetKey:
        return (self.category_id, self.subject_id, self.detail_id)
