"""
Model provider implementations.

This package collects base types and helper classes in `base.py` and
concrete provider implementations for OpenAI, Perplexity (OpenAI-compatible),
and Anthropic. Adding a new provider involves creating a new module
that subclasses `BaseProvider` and listing it in `PROVIDER_CLASSES`.
"""

from orchestra.models.anthropic_provider import AnthropicProvider
from orchestra.models.openai_provider import OpenAIProvider
from orchestra.models.perplexity_provider import PerplexityProvider

PROVIDER_CLASSES = {
    "openai": OpenAIProvider,
    "perplexity": PerplexityProvider,
    "anthropic": AnthropicProvider,
}

__all__ = [
    "base",
    "openai_provider",
    "perplexity_provider",
    "anthropic_provider",
    "AnthropicProvider",
    "OpenAIProvider",
    "PerplexityProvider",
    "PROVIDER_CLASSES",
]
