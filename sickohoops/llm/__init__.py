"""Generative providers and prompt templates for quiz generation."""

import logging
from typing import Optional

from sickohoops.config import ANTHROPIC_API_KEY, GENERATIVE_PROVIDERS, OPENAI_API_KEY
from sickohoops.llm.prompts import QUIZ_SYSTEM_PROMPT, build_quiz_prompt
from sickohoops.llm.providers import (
    AnthropicProvider,
    GenerativeProvider,
    LLMResponse,
    OllamaLLM,
    OpenAIProvider,
)

logger = logging.getLogger(__name__)


def build_providers(names: Optional[list[str]] = None) -> list[GenerativeProvider]:
    """
    Construct the configured generative providers, in fallback order.

    Providers whose API key is missing are skipped with a warning, as is
    Ollama when the server is unreachable or the model has not been pulled.
    """
    providers = []
    for name in names if names is not None else GENERATIVE_PROVIDERS:
        if name == "openai":
            if not OPENAI_API_KEY:
                logger.warning("Skipping OpenAI provider: OPENAI_API_KEY not set")
                continue
            providers.append(OpenAIProvider())
        elif name == "anthropic":
            if not ANTHROPIC_API_KEY:
                logger.warning("Skipping Anthropic provider: ANTHROPIC_API_KEY not set")
                continue
            providers.append(AnthropicProvider())
        elif name == "ollama":
            ollama = OllamaLLM()
            if not ollama.is_available():
                logger.warning(f"Skipping Ollama provider: no server at {ollama.host}")
                continue
            if not ollama.model_exists():
                logger.warning(f"Skipping Ollama provider: model {ollama.model} not found (run: ollama pull {ollama.model})")
                continue
            providers.append(ollama)
        else:
            logger.warning(f"Ignoring unknown generative provider: {name}")
    return providers


__all__ = [
    "AnthropicProvider",
    "GenerativeProvider",
    "LLMResponse",
    "OllamaLLM",
    "OpenAIProvider",
    "QUIZ_SYSTEM_PROMPT",
    "build_providers",
    "build_quiz_prompt",
]
