from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ledger_ml.inference.retry import retry_with_backoff

from .port import EmbeddingPort, ServiceStatus

logger = logging.getLogger(__name__)

SERVICE_NAME = "embedding service"


class EmbeddingResponseError(ValueError):
    """Embedding service answered without a usable vector."""


class OllamaEmbeddingClient(EmbeddingPort):
    """Ollama embedding adapter (`POST /api/embeddings`)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "bge-m3",
        timeout: float = 30.0,
        health_timeout: float = 5.0,
        retry_attempts: int = 3,
        retry_base_delay: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.health_timeout = health_timeout
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self._timeout = httpx.Timeout(connect=5.0, read=timeout, write=10.0, pool=5.0)
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _parse_response(self, resp: httpx.Response) -> list[float]:
        try:
            data: Any = resp.json()
        except ValueError as e:
            msg = f"Non-JSON embedding response from model '{self.model}'"
            raise EmbeddingResponseError(msg) from e
        if not isinstance(data, dict):
            msg = f"Unexpected embedding payload from model '{self.model}'"
            raise EmbeddingResponseError(msg)

        embedding = data.get("embedding")
        if not embedding:
            msg = f"No embedding in response from model '{self.model}'"
            raise EmbeddingResponseError(msg)
        return [float(value) for value in embedding]

    async def _embed_once(self, text: str) -> list[float]:
        resp = await self._get_client().post(
            "/api/embeddings",
            json={"model": self.model, "prompt": text},
        )
        resp.raise_for_status()
        return self._parse_response(resp)

    async def embed(self, text: str) -> list[float]:
        return await retry_with_backoff(
            lambda: self._embed_once(text),
            service=SERVICE_NAME,
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            retry_on=(httpx.HTTPError, EmbeddingResponseError),
        )

    async def health_check(self) -> ServiceStatus:
        start = time.perf_counter()
        try:
            resp = await self._get_client().get("/api/version", timeout=self.health_timeout)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Embedding service health check failed: %s", e)
            return ServiceStatus(status="unhealthy", error=str(e) or type(e).__name__)

        latency_ms = int((time.perf_counter() - start) * 1000)
        return ServiceStatus(status="healthy", latency_ms=latency_ms)
