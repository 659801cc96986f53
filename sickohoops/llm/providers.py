"""
Generative provider clients for quiz generation.

Each provider wraps one LLM API behind the same small interface:
complete(prompt, system_prompt) -> LLMResponse. Client objects are passed
in (or built from config) so tests can substitute fakes.

Providers:
- OpenAIProvider: OpenAI chat completions in JSON mode (default first choice)
- AnthropicProvider: Anthropic messages API (default fallback)
- OllamaLLM: local Ollama server over HTTP (optional)
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import anthropic
import openai
import requests

from sickohoops.config import (
    ANTHROPIC_API_KEY,
    ANTHROPIC_MAX_TOKENS,
    ANTHROPIC_MODEL,
    LLM_TEMPERATURE,
    LLM_TIMEOUT,
    OLLAMA_HOST,
    OLLAMA_MODEL,
    OPENAI_API_KEY,
    OPENAI_MODEL,
)
from sickohoops.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from a generative provider."""
    content: str
    model: str
    provider: str
    total_duration_ms: Optional[float] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class GenerativeProvider:
    """
    Base class for generative providers.

    Subclasses set name/default_max_items and implement complete().
    Any failure (network, timeout, API error) must surface as ProviderError.
    """

    name = "generative"
    default_max_items = 50

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={getattr(self, 'model', None)!r})"


class OpenAIProvider(GenerativeProvider):
    """OpenAI chat completions, asking for a JSON object response."""

    name = "openai"
    default_max_items = 50

    def __init__(
        self,
        client: Any = None,
        model: Optional[str] = None,
        temperature: float = LLM_TEMPERATURE,
        timeout: float = LLM_TIMEOUT,
    ):
        self.model = model or OPENAI_MODEL
        self.temperature = temperature
        self.client = client or openai.OpenAI(api_key=OPENAI_API_KEY, timeout=timeout)

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise ProviderError(f"OpenAI request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = ""
        if choices and choices[0].message is not None:
            content = choices[0].message.content or ""

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content,
            model=getattr(response, "model", None) or self.model,
            provider=self.name,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )


class AnthropicProvider(GenerativeProvider):
    """Anthropic messages API; text blocks are concatenated."""

    name = "anthropic"
    default_max_items = 30

    def __init__(
        self,
        client: Any = None,
        model: Optional[str] = None,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = ANTHROPIC_MAX_TOKENS,
        timeout: float = LLM_TIMEOUT,
    ):
        self.model = model or ANTHROPIC_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=ANTHROPIC_API_KEY, timeout=timeout)

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.AnthropicError as e:
            raise ProviderError(f"Anthropic request failed: {e}") from e

        content = "".join(
            block.text for block in (response.content or [])
            if getattr(block, "type", None) == "text"
        )

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content,
            model=getattr(response, "model", None) or self.model,
            provider=self.name,
            prompt_tokens=getattr(usage, "input_tokens", None),
            completion_tokens=getattr(usage, "output_tokens", None),
        )


class OllamaLLM(GenerativeProvider):
    """
    Client for a local Ollama server.

    Ollama must be running locally (or accessible via network).
    Install: https://ollama.ai

    Requests use Ollama's JSON output mode, which keeps small local models
    from wrapping the quiz in prose.
    """

    name = "ollama"
    default_max_items = 30

    def __init__(
        self,
        host: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = LLM_TEMPERATURE,
        timeout: float = LLM_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Ollama client.

        Args:
            host: Ollama server URL (default: http://localhost:11434)
            model: Model name (default: llama3.1)
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            session: Optional requests session (for connection reuse/tests)
        """
        self.host = (host or OLLAMA_HOST).rstrip("/")
        self.model = model or OLLAMA_MODEL
        self.temperature = temperature
        self.timeout = timeout
        self.session = session or requests.Session()

        logger.debug(f"Ollama provider initialized: host={self.host}, model={self.model}")

    def _api_url(self, endpoint: str) -> str:
        """Build API URL."""
        return f"{self.host}/api/{endpoint}"

    def is_available(self) -> bool:
        """Check if Ollama server is available."""
        try:
            response = self.session.get(self._api_url("tags"), timeout=5)
            return response.status_code == 200
        except requests.RequestException:
            return False

    def list_models(self) -> list[str]:
        """List available models."""
        try:
            response = self.session.get(self._api_url("tags"), timeout=10)
            response.raise_for_status()
            data = response.json()
            return [m["name"] for m in data.get("models", [])]
        except requests.RequestException as e:
            logger.debug(f"Error listing Ollama models: {e}")
            return []

    def model_exists(self, model_name: Optional[str] = None) -> bool:
        """Check if a specific model is available."""
        model = model_name or self.model
        # Exact match or base name match ("llama3.1" matches "llama3.1:latest")
        return any(
            m == model or m.startswith(f"{model}:")
            for m in self.list_models()
        )

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {
                "temperature": self.temperature,
            },
        }

        if system_prompt:
            payload["system"] = system_prompt

        try:
            response = self.session.post(
                self._api_url("generate"),
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Ollama request failed: {e}") from e

        return LLMResponse(
            content=data.get("response", ""),
            model=data.get("model", self.model),
            provider=self.name,
            total_duration_ms=data.get("total_duration", 0) / 1_000_000,  # ns to ms
            prompt_tokens=data.get("prompt_eval_count"),
            completion_tokens=data.get("eval_count"),
        )
