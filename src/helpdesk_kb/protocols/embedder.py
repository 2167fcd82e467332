"""Protocol for embedding providers."""

from __future__ import annotations

from typing import Protocol


class Embedder(Protocol):
    async def embed(self, text: str) -> list[float]:
        """Raises EmbeddingUnavailable when the provider fails or returns no vector."""
        ...

    @property
    def dimensions(self) -> int: ...
