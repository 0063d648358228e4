from .service import IndexingService, IndexResult

__all__ = ["IndexResult", "IndexingService"]
