"""OpenAI embedding provider (text-embedding-3-small by default)."""

from __future__ import annotations

from openai import AsyncOpenAI

from helpdesk_kb.exceptions import EmbeddingUnavailable
from helpdesk_kb.observability.logger import get_logger

logger = get_logger("openai_embeddings")


class OpenAIEmbedder:
    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key)
        self._model = model
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model(self) -> str:
        return self._model

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(
                input=[text], model=self._model, dimensions=self._dimensions
            )
        except Exception as e:
            raise EmbeddingUnavailable(f"Failed to embed text: {e}") from e
        if not response.data or not response.data[0].embedding:
            raise EmbeddingUnavailable("Embedding response contained no vector")
        logger.debug("embedded_text", model=self._model, chars=len(text))
        return list(response.data[0].embedding)
