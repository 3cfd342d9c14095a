"""AI search collaborator: request model, Perplexity client and prompt building."""

from .base import AISearchClient, AISearchRequest
from .perplexity_client import PerplexityClient

__all__ = ["AISearchClient", "AISearchRequest", "PerplexityClient"]
