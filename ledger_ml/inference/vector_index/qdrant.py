from __future__ import annotations

import logging
import time

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from ledger_ml.inference.embedding.port import ServiceStatus
from ledger_ml.inference.retry import retry_with_backoff

from .port import VectorHit, VectorIndexPort, VectorPoint

logger = logging.getLogger(__name__)

SERVICE_NAME = "vector index"
TENANT_FIELD = "tenant"


class QdrantVectorIndex(VectorIndexPort):
    """Qdrant adapter. Collections are named `{prefix}{tenant}`."""

    def __init__(
        self,
        url: str = "http://localhost:6333",
        api_key: str | None = None,
        timeout: float = 10.0,
        vector_size: int = 1024,
        collection_prefix: str = "transactions_",
        retry_attempts: int = 3,
        retry_base_delay: float = 1.0,
        client: AsyncQdrantClient | None = None,
    ):
        self.vector_size = vector_size
        self.collection_prefix = collection_prefix
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self._client = client or AsyncQdrantClient(
            url=url,
            api_key=api_key,
            timeout=int(timeout),
        )

    def collection_for(self, tenant: str) -> str:
        return f"{self.collection_prefix}{tenant}"

    async def _retry(self, operation):
        return await retry_with_backoff(
            operation,
            service=SERVICE_NAME,
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
        )

    async def _create(self, collection: str) -> None:
        await self._client.create_collection(
            collection_name=collection,
            vectors_config=VectorParams(size=self.vector_size, distance=Distance.COSINE),
        )
        logger.info(
            "Created collection '%s' (size=%d, distance=cosine)",
            collection,
            self.vector_size,
        )

    async def ensure_collection(self, tenant: str) -> str:
        collection = self.collection_for(tenant)

        async def _ensure() -> None:
            if not await self._client.collection_exists(collection):
                await self._create(collection)

        await self._retry(_ensure)
        return collection

    async def recreate_collection(self, tenant: str) -> str:
        """Drop the tenant collection (if any) and create it empty."""
        collection = self.collection_for(tenant)

        async def _recreate() -> None:
            if await self._client.collection_exists(collection):
                await self._client.delete_collection(collection_name=collection)
                logger.info("Deleted collection '%s'", collection)
            await self._create(collection)

        await self._retry(_recreate)
        return collection

    async def search(
        self,
        tenant: str,
        vector: list[float],
        limit: int,
        score_threshold: float,
    ) -> list[VectorHit]:
        collection = self.collection_for(tenant)

        async def _search():
            if not await self._client.collection_exists(collection):
                return []
            response = await self._client.query_points(
                collection_name=collection,
                query=vector,
                limit=limit,
                score_threshold=score_threshold,
                query_filter=Filter(
                    must=[FieldCondition(key=TENANT_FIELD, match=MatchValue(value=tenant))]
                ),
                with_payload=True,
            )
            return response.points

        points = await self._retry(_search)
        return [
            VectorHit(id=str(point.id), score=float(point.score), payload=point.payload or {})
            for point in points
        ]

    async def upsert(self, tenant: str, points: list[VectorPoint]) -> None:
        if not points:
            return
        collection = self.collection_for(tenant)
        structs = [
            PointStruct(
                id=point.id,
                vector=point.vector,
                payload={**point.payload, TENANT_FIELD: tenant},
            )
            for point in points
        ]

        async def _upsert() -> None:
            await self._client.upsert(collection_name=collection, points=structs, wait=True)

        await self._retry(_upsert)
        logger.debug("Upserted %d points into '%s'", len(structs), collection)

    async def health_check(self) -> ServiceStatus:
        start = time.perf_counter()
        try:
            await self._client.get_collections()
        except Exception as e:
            logger.warning("Vector index health check failed: %s", e)
            return ServiceStatus(status="unhealthy", error=str(e) or type(e).__name__)

        latency_ms = int((time.perf_counter() - start) * 1000)
        return ServiceStatus(status="healthy", latency_ms=latency_ms)

    async def close(self) -> None:
        await self._client.close()
