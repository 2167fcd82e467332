"""Google Gemini embedding provider using the google-genai SDK."""

from __future__ import annotations

from google import genai
from google.genai import types

from helpdesk_kb.exceptions import EmbeddingUnavailable
from helpdesk_kb.observability.logger import get_logger

logger = get_logger("gemini_embeddings")


class GeminiEmbedder:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-embedding-exp-03-07",
        dimensions: int = 3072,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
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
            response = await self._client.aio.models.embed_content(
                model=self._model,
                contents=text,
                config=types.EmbedContentConfig(output_dimensionality=self._dimensions),
            )
        except Exception as e:
            raise EmbeddingUnavailable(f"Gemini embedding failed: {e}") from e

        if not response.embeddings or not response.embeddings[0].values:
            raise EmbeddingUnavailable("Gemini returned no embedding values")
        logger.debug("embedded_text", model=self._model, chars=len(text))
        return list(response.embeddings[0].values)
