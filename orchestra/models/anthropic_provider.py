"""
Anthropic provider implementation.

This provider wraps the Claude API via the official `anthropic` SDK.
It translates OpenAI-style chat messages into the format expected by
Anthropic's Claude models, either collecting the response into a
string or streaming text deltas.
"""

import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import anthropic

from orchestra.models.base import (
    BaseProvider,
    ChatResponse,
    ModelInfo,
    ProviderError,
    parse_models,
)

logger = logging.getLogger(__name__)


def convert_messages(
    messages: List[Dict[str, Any]]
) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Split OpenAI chat messages into an Anthropic system prompt and
    a user/assistant message list.
    """
    system_prompt = ""
    converted: List[Dict[str, Any]] = []
    for msg in messages:
        role = msg.get("role")
        content = msg.get("content", "")
        if role == "system":
            system_prompt += content + "\n"
        elif role == "assistant":
            converted.append({"role": "assistant", "content": content})
        else:
            converted.append({"role": "user", "content": content})
    return system_prompt.strip(), converted


class AnthropicProvider(BaseProvider):
    """
    AnthropicProvider wraps the Claude messages API via the official anthropic SDK.
    """

    def __init__(
        self,
        name: str,
        api_key_env: str,
        models: Dict[str, ModelInfo],
    ) -> None:
        super().__init__(name=name)
        self.api_key_env = api_key_env
        self.models = models

    @classmethod
    def from_config(cls, name: str, cfg: Dict[str, Any]) -> "AnthropicProvider":
        return cls(
            name=name,
            api_key_env=cfg.get("api_key_env", "ANTHROPIC_API_KEY"),
            models=parse_models(cfg.get("models", {}), default_context=200000),
        )

    def _client(self) -> anthropic.AsyncAnthropic:
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ProviderError(
                f"Environment variable '{self.api_key_env}' is not set for provider '{self.name}'."
            )
        return anthropic.AsyncAnthropic(api_key=api_key)

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> ChatResponse:
        client = self._client()
        system_prompt, converted = convert_messages(messages)
        try:
            resp = await client.messages.create(
                model=model,
                system=system_prompt,
                messages=converted,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(f"Anthropic provider error: {exc}") from exc
        parts = []
        for block in resp.content:
            if getattr(block, "type", "") == "text":
                parts.append(block.text)
        return ChatResponse(text="\n".join(parts), raw=resp)

    async def stream(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> AsyncIterator[str]:
        client = self._client()
        system_prompt, converted = convert_messages(messages)
        try:
            async with client.messages.stream(
                model=model,
                system=system_prompt,
                messages=converted,
                max_tokens=max_tokens,
                temperature=temperature,
            ) as stream_resp:
                async for text in stream_resp.text_stream:
                    yield text
        except anthropic.AnthropicError as exc:
            raise ProviderError(f"Anthropic stream error: {exc}") from exc
