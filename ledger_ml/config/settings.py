from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._utils import resolve_env_file_path


class Settings(BaseSettings):
    """Classification service configuration."""

    log_level: str = "INFO"

    # Database config needs alias because the service configs are prefixed
    # with LEDGER_ML_ (see SettingsConfigDict). But the postgres configs are
    # shared with the bookkeeping backend.
    postgres_host: str = Field(default="localhost", validation_alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, validation_alias="POSTGRES_PORT")
    postgres_user: str = Field(default="ledger", validation_alias="POSTGRES_USER")
    postgres_password: str = Field(default="", validation_alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="ledger", validation_alias="POSTGRES_DB")
    database_url_override: str | None = Field(
        default=None, validation_alias="LEDGER_ML_DATABASE_URL"
    )
    database_pool_size: int = 10
    database_max_overflow: int = 5
    database_echo: bool = False

    @property
    def database_url(self) -> str:
        """Explicit database URL if set, else built from the postgres settings."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Vector index (Qdrant)
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str | None = None
    qdrant_timeout: float = 10.0
    vector_size: int = 1024  # bge-m3
    collection_prefix: str = "transactions_"

    # Embedding service (Ollama)
    ollama_url: str = "http://localhost:11434"
    embedding_model: str = "bge-m3"
    embedding_timeout: float = 30.0
    health_timeout: float = 5.0

    # Retry policy for embedding / vector index calls
    retry_attempts: int = 3
    retry_base_delay: float = 1.0

    # Fan-out and batch sizes
    batch_concurrency: int = 5
    index_batch_max: int = 50
    reindex_batch_size: int = 10
    reindex_default_limit: int = 5000

    # Stage gates (confidence is 0-100, similarities are 0-1)
    rule_confidence_min: int = 95
    exact_confidence_min: int = 85
    semantic_confidence_min: int = 70
    entity_confidence_min: int = 80
    vector_similarity_min: float = 0.82
    amount_proximity_min: float = 0.70
    original_similarity_min: float = 0.85
    normalized_similarity_min: float = 0.70
    normalized_confidence_cap: int = 92
    token_confidence_cap: int = 88

    # Stage weights
    exact_weight_text: float = 0.50
    exact_weight_amount: float = 0.30
    exact_weight_recency: float = 0.10
    exact_weight_frequency: float = 0.10
    semantic_weight_vector: float = 0.40
    semantic_weight_amount: float = 0.30
    semantic_weight_recency: float = 0.15
    semantic_weight_frequency: float = 0.15

    # Response cache
    suggestions_cache_ttl: int = 600
    analytics_cache_ttl: int = 300

    model_config = SettingsConfigDict(
        env_file=resolve_env_file_path(),
        env_file_encoding="utf-8",
        env_prefix="LEDGER_ML_",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
