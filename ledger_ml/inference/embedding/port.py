from dataclasses import dataclass
from typing import Protocol


@dataclass
class ServiceStatus:
    """Result of probing an external dependency."""

    status: str  # "healthy" | "unhealthy"
    latency_ms: int | None = None
    error: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"


class EmbeddingPort(Protocol):
    """Port for text embedding backends."""

    async def embed(self, text: str) -> list[float]:
        """Embed one text. Raises DependencyUnavailableError after retries."""
        ...

    async def health_check(self) -> ServiceStatus: ...

    async def close(self) -> None: ...
