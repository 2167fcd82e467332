"""Build the configured embedding provider."""

from __future__ import annotations

from helpdesk_kb.config.settings import Settings
from helpdesk_kb.embeddings.gemini_embedder import GeminiEmbedder
from helpdesk_kb.embeddings.openai_embedder import OpenAIEmbedder
from helpdesk_kb.exceptions import ConfigurationError


def create_embedder(settings: Settings) -> GeminiEmbedder | OpenAIEmbedder:
    if settings.embedding_provider == "gemini":
        if not settings.google_api_key:
            raise ConfigurationError("HELPDESK_GOOGLE_API_KEY is required for Gemini embeddings")
        return GeminiEmbedder(
            api_key=settings.google_api_key,
            model=settings.embedding_model,
            dimensions=settings.embedding_dimensions,
        )
    if settings.embedding_provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("HELPDESK_OPENAI_API_KEY is required for OpenAI embeddings")
        return OpenAIEmbedder(
            api_key=settings.openai_api_key,
            model=settings.embedding_model,
            dimensions=settings.embedding_dimensions,
        )
    raise ConfigurationError(f"Unknown embedding provider: {settings.embedding_provider}")
