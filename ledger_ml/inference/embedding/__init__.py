from .ollama import OllamaEmbeddingClient
from .port import EmbeddingPort, ServiceStatus

__all__ = ["EmbeddingPort", "OllamaEmbeddingClient", "ServiceStatus"]
