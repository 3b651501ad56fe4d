"""LLM model abstraction for consistent model access across the application."""

from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider


def get_model(provider: str, model_name: str, api_key: str | None = None):
    """Build a pydantic-ai model.

    Without an api_key the provider reads its own environment variable
    (GOOGLE_API_KEY / OPENAI_API_KEY).
    """
    if provider == "google":
        if api_key:
            return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))
        return GoogleModel(model_name)

    if provider == "openai":
        if api_key:
            return OpenAIChatModel(model_name, provider=OpenAIProvider(api_key=api_key))
        return OpenAIChatModel(model_name)

    raise ValueError(f"Unsupported LLM provider: {provider}")
