"""
Perplexity provider implementation.

This provider uses Perplexity's OpenAI-compatible API endpoint to
perform chat completions. It reuses the OpenAI provider with a custom
base URL and environment variable for the API key.
"""

from orchestra.models.openai_provider import OpenAIProvider


class PerplexityProvider(OpenAIProvider):
    """
    PerplexityProvider uses Perplexity's OpenAI-compatible Chat Completions API.
    """

    default_api_key_env = "PERPLEXITY_API_KEY"
    default_base_url = "https://api.perplexity.ai"
    label = "Perplexity"
