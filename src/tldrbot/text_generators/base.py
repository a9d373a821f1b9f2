from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence


class TextGeneratorAPI(ABC):
    """Abstract base class for text generator providers."""

    @abstractmethod
    async def generate(
        self,
        prompt: str | Sequence[dict[str, Any]],
        *,
        max_tokens: int | None = None,
    ) -> str:
        """Return generated text for the given prompt."""
        raise NotImplementedError
