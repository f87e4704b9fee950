"""
Model routing logic.

The router is responsible for resolving which provider and model
should handle a given chat request. It delegates the actual API
requests to the provider classes in the models package.
"""

from typing import Any, AsyncIterator, Dict, List, Optional

from orchestra.models.base import ChatResponse, ModelRegistry, ProviderError, split_model_id


class ModelRouter:
    """
    ModelRouter dispatches chat requests to the appropriate provider
    and model based on the configuration of the model registry. It
    abstracts away the details of provider-specific API calls from
    higher-level agent logic.

    Models are selected with `"<provider>/<model_key>"` ids, e.g.
    `"openai/gpt4o_mini"`.
    """

    def __init__(self, model_registry: ModelRegistry) -> None:
        self.model_registry = model_registry

    async def chat(
        self,
        model_id: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> ChatResponse:
        """
        Forward a chat completion request to the chosen provider and model.

        Args:
            model_id: The `"provider/model_key"` selector.
            messages: A list of message dicts in OpenAI chat format.
            max_tokens: Upper bound on generated tokens.
            temperature: Sampling temperature.
            region: Optional deployment locality passed to the provider.

        Returns:
            A ChatResponse object containing the response text and raw data.

        Raises:
            ProviderError: If the provider or model cannot be resolved or
                the API call fails.
        """
        provider, model_info = self.model_registry.resolve(*split_model_id(model_id))
        return await provider.chat(
            model=model_info.name,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            region=region,
        )

    def stream(
        self,
        model_id: str,
        messages: List[Dict[str, Any]],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        region: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """
        Open a streaming completion and return the provider's async
        generator of text deltas. Resolution errors are raised here,
        before any fragment is produced, as is a request to stream from a
        model configured with `supports_stream: false`.
        """
        provider, model_info = self.model_registry.resolve(*split_model_id(model_id))
        if not model_info.supports_stream:
            raise ProviderError(f"Model '{model_id}' does not support streaming.")
        return provider.stream(
            model=model_info.name,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            region=region,
        )
