from dataclasses import dataclass, field
from typing import Any, Protocol

from ledger_ml.inference.embedding.port import ServiceStatus


@dataclass
class VectorPoint:
    """A vector and its payload, keyed by transaction id."""

    id: str
    vector: list[float]
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorHit:
    """A nearest-neighbour search hit."""

    id: str
    score: float
    payload: dict[str, Any]


class VectorIndexPort(Protocol):
    """Port for vector index backends. One collection per tenant."""

    def collection_for(self, tenant: str) -> str: ...

    async def ensure_collection(self, tenant: str) -> str:
        """Create the tenant collection if absent and return its name."""
        ...

    async def recreate_collection(self, tenant: str) -> str: ...

    async def search(
        self,
        tenant: str,
        vector: list[float],
        limit: int,
        score_threshold: float,
    ) -> list[VectorHit]: ...

    async def upsert(self, tenant: str, points: list[VectorPoint]) -> None: ...

    async def health_check(self) -> ServiceStatus: ...

    async def close(self) -> None: ...
