"""
OpenAI provider implementation.

Wraps the OpenAI Chat Completions API using the official async SDK.
Supports non-streaming and streaming responses. The provider
configuration must specify the environment variable containing the
API key, the base URL for the API, and a list of models with their
capabilities. An optional `regions` table maps a region name to a
regional base URL (data residency endpoints).
"""

import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI

from orchestra.models.base import (
    BaseProvider,
    ChatResponse,
    ModelInfo,
    ProviderError,
    parse_models,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseProvider):
    """
    OpenAIProvider wraps the OpenAI Chat Completions API via the official SDK.
    """

    default_api_key_env = "OPENAI_API_KEY"
    default_base_url = "https://api.openai.com/v1"
    label = "OpenAI"

    def __init__(
        self,
        name: str,
        api_key_env: str,
        base_url: str,
        models: Dict[str, ModelInfo],
        regions: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(name=name)
        self.api_key_env = api_key_env
        self.base_url = base_url
        self.models = models
        self.regions = regions or {}

    @classmethod
    def from_config(cls, name: str, cfg: Dict[str, Any]) -> "OpenAIProvider":
        return cls(
            name=name,
            api_key_env=cfg.get("api_key_env", cls.default_api_key_env),
            base_url=cfg.get("base_url", cls.default_base_url),
            models=parse_models(cfg.get("models", {})),
            regions=dict(cfg.get("regions", {}) or {}),
        )

    def _base_url_for(self, region: Optional[str]) -> str:
        if region and region in self.regions:
            return self.regions[region]
        if region:
            logger.debug(
                "Provider '%s' has no endpoint for region '%s', using %s",
                self.name,
                region,
                self.base_url,
            )
        return self.base_url

    def _client(self, region: Optional[str] = None) -> AsyncOpenAI:
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ProviderError(
                f"Environment variable '{self.api_key_env}' is not set for provider '{self.name}'."
            )
        return AsyncOpenAI(api_key=api_key, base_url=self._base_url_for(region))

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> ChatResponse:
        client = self._client(region)
        try:
            resp = await client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(f"{self.label} provider error: {exc}") from exc
        text = resp.choices[0].message.content or ""
        return ChatResponse(text=text, raw=resp)

    async def stream(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> AsyncIterator[str]:
        client = self._client(region)
        try:
            stream_resp = await client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                stream=True,
            )
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(f"{self.label} provider error: {exc}") from exc
        try:
            async for chunk in stream_resp:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta.content:
                    yield delta.content
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(f"{self.label} stream error: {exc}") from exc
        finally:
            # Releases the HTTP connection when the consumer stops early.
            await stream_resp.close()
