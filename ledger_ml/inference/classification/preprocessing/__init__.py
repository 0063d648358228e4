from .normalizer import (
    extract_significant_tokens,
    normalize_description,
    suggestion_pattern,
)

__all__ = ["normalize_description", "extract_significant_tokens", "suggestion_pattern"]
