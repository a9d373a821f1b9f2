# text_generators/openai_chatgpt.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence, TypedDict, Union
import logging

from openai import APIConnectionError, APIError, AsyncOpenAI, RateLimitError

from .base import TextGeneratorAPI

_CLIENT_CACHE: Dict[str, AsyncOpenAI] = {}
_LOG = logging.getLogger(__name__)


class _Message(TypedDict):
    role: str
    content: str


class OpenAIChatTextGenerator(TextGeneratorAPI):
    """Text-generation backend for OpenAI models.

    - gpt-5 family models go through the Responses API with low reasoning effort.
    - Everything else (e.g., gpt-4o-mini) uses Chat Completions.

    Requires OPENAI_API_KEY in the environment.
    Accepts either a single string or a list of {role, content} messages.
    """

    def __init__(self, model: str = "gpt-4o-mini") -> None:
        self.model = model

    def _get_client(self) -> AsyncOpenAI:
        if "default" not in _CLIENT_CACHE:
            _CLIENT_CACHE["default"] = AsyncOpenAI()  # picks up OPENAI_API_KEY
        return _CLIENT_CACHE["default"]

    def _is_gpt5(self) -> bool:
        return (self.model or "").lower().startswith("gpt-5")

    @staticmethod
    def _normalize(prompt: Union[str, Sequence[_Message]]) -> List[_Message]:
        if isinstance(prompt, str):
            return [{"role": "user", "content": prompt}]
        if isinstance(prompt, Sequence):
            if not all(isinstance(m, dict) and "role" in m and "content" in m for m in prompt):
                raise TypeError("Each message must be a dict with 'role' and 'content' keys")
            return list(prompt)  # type: ignore[arg-type]
        raise TypeError("prompt must be a string or a sequence of message dicts")

    @staticmethod
    def _split_instructions(messages: List[_Message]) -> tuple[str | None, List[Dict[str, Any]]]:
        """Take the first system message as Responses ``instructions``.

        Remaining messages are passed through as EasyInput messages.
        """
        instructions: str | None = None
        out: List[Dict[str, Any]] = []
        for m in messages:
            role = (m.get("role") or "user").lower()
            if role == "system" and instructions is None:
                instructions = str(m.get("content") or "")
                continue
            out.append({"role": role, "content": str(m.get("content") or ""), "type": "message"})
        return instructions, out

    async def _generate_responses(self, client: AsyncOpenAI, messages: List[_Message], max_tokens: int | None) -> str:
        instructions, input_messages = self._split_instructions(messages)
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "input": input_messages,
            "reasoning": {"effort": "low"},
        }
        if instructions:
            kwargs["instructions"] = instructions
        if max_tokens:
            kwargs["max_output_tokens"] = max_tokens

        resp = await client.responses.create(**kwargs)
        text = getattr(resp, "output_text", None)
        if not text:
            parts: List[str] = []
            for item in getattr(resp, "output", None) or []:
                for c in getattr(item, "content", []) or []:
                    tt = getattr(c, "text", None)
                    if tt:
                        parts.append(tt)
            text = "\n".join(parts)
        return (text or "").strip()

    async def generate(
        self,
        prompt: Union[str, Sequence[_Message]],
        *,
        max_tokens: int | None = None,
        temperature: float = 1.0,
    ) -> str:
        messages = self._normalize(prompt)
        client = self._get_client()

        try:
            if self._is_gpt5():
                return await self._generate_responses(client, messages, max_tokens)

            kwargs: Dict[str, Any] = {
                "model": self.model,
                "messages": messages,
                "temperature": temperature,
            }
            if max_tokens:
                kwargs["max_tokens"] = max_tokens
            resp = await client.chat.completions.create(**kwargs)
        except RateLimitError as e:
            _LOG.warning("OpenAI rate limit hit for model %s: %s", self.model, e)
            raise
        except APIConnectionError as e:
            _LOG.error("OpenAI connection error for model %s: %s", self.model, e)
            raise
        except APIError as e:
            _LOG.error("OpenAI API error for model %s: %s", self.model, e)
            raise

        if not resp.choices:
            return ""
        return (resp.choices[0].message.content or "").strip()
