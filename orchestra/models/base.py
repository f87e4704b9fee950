"""
Base types and registry for model providers.

Defines common classes and data structures that all model providers
implement, along with a registry to map provider names and models.
Providers are asynchronous: `chat` awaits one complete response and
`stream` yields text deltas as the backend produces them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple


@dataclass
class ChatResponse:
    """
    Normalized chat response returned by providers.

    The text attribute contains the plain response text. The raw
    attribute contains provider-specific response data for debugging
    or advanced use.
    """

    text: str
    raw: Any


class ProviderError(Exception):
    """Raised when a provider fails to execute a request."""


class BaseProvider:
    """
    Abstract base class for all LLM providers.

    Providers must implement `chat` and `stream`. A classmethod
    `from_config` is used to construct provider instances from
    configuration dictionaries.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.models: Dict[str, ModelInfo] = {}

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> ChatResponse:
        raise NotImplementedError

    def stream(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Return an async generator of text deltas."""
        raise NotImplementedError

    @classmethod
    def from_config(cls, name: str, cfg: Dict[str, Any]) -> "BaseProvider":
        raise NotImplementedError


@dataclass
class ModelInfo:
    """
    ModelInfo stores metadata about a model used by a provider.
    """

    name: str
    supports_stream: bool = True
    max_context_tokens: int = 8192


def parse_models(
    models_cfg: Dict[str, Any], default_context: int = 8192
) -> Dict[str, ModelInfo]:
    """Build the `ModelInfo` table from a provider's `models:` section."""
    models: Dict[str, ModelInfo] = {}
    for model_key, mcfg in models_cfg.items():
        models[model_key] = ModelInfo(
            name=mcfg["name"],
            supports_stream=bool(mcfg.get("supports_stream", True)),
            max_context_tokens=int(mcfg.get("max_context_tokens", default_context)),
        )
    return models


def split_model_id(model_id: str) -> Tuple[str, str]:
    """
    Split a `"provider/model_key"` selector into its two parts.

    Raises:
        ProviderError: If the selector is not of that form.
    """
    provider_name, sep, model_key = model_id.partition("/")
    if not sep or not provider_name or not model_key:
        raise ProviderError(
            f"Invalid model id '{model_id}', expected '<provider>/<model_key>'."
        )
    return provider_name, model_key


class ModelRegistry:
    """
    ModelRegistry keeps track of providers and their models.
    """

    def __init__(self) -> None:
        self.providers: Dict[str, BaseProvider] = {}
        self.models: Dict[Tuple[str, str], ModelInfo] = {}

    def register_provider(self, provider: BaseProvider) -> None:
        """Register a provider together with every model it declares."""
        self.providers[provider.name] = provider
        for model_key, model_info in provider.models.items():
            self.register_model(provider.name, model_key, model_info)

    def register_model(
        self,
        provider_name: str,
        model_key: str,
        model_info: ModelInfo,
    ) -> None:
        self.models[(provider_name, model_key)] = model_info

    def resolve(
        self, provider_name: str, model_key: str
    ) -> Tuple[BaseProvider, ModelInfo]:
        """
        Resolve a provider and model pair from registered names.
        """
        provider = self.providers.get(provider_name)
        if provider is None:
            raise ProviderError(f"Provider '{provider_name}' not registered.")
        model_info = self.models.get((provider_name, model_key))
        if model_info is None:
            raise ProviderError(
                f"Model '{model_key}' not registered for provider '{provider_name}'."
            )
        return provider, model_info
