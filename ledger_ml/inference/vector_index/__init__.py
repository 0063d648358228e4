from .port import VectorHit, VectorIndexPort, VectorPoint
from .qdrant import QdrantVectorIndex

__all__ = ["QdrantVectorIndex", "VectorHit", "VectorIndexPort", "VectorPoint"]
