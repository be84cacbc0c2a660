"""
LLM access for transcript ingestion.

Every call has the same shape: a system prompt and a user prompt in, one JSON
object out. Providers wrap the vendor SDKs, ask for JSON-only output where
the API supports it, flag replies cut off at the token limit, and retry
transient failures (rate limits, dropped connections, server errors) with
exponential backoff.
"""

import importlib
import json
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

MAX_RETRIES = 5
BASE_DELAY = 1.0

# A full report for a dozen teams runs to several thousand tokens
DEFAULT_MAX_TOKENS = 8192

# Exception classes present in both the anthropic and openai SDKs
TRANSIENT_ERROR_NAMES = ("RateLimitError", "APIConnectionError", "InternalServerError")

T = TypeVar("T")


def transient_errors(sdk: ModuleType) -> Tuple[Type[Exception], ...]:
    """The SDK's exception classes that are worth retrying."""
    return tuple(getattr(sdk, name) for name in TRANSIENT_ERROR_NAMES if hasattr(sdk, name))


def call_with_retry(
    operation: Callable[[], T],
    retryable: Tuple[Type[Exception], ...],
    label: str,
) -> T:
    """
    Run operation, retrying retryable errors with exponential backoff.

    The delay doubles from BASE_DELAY. After MAX_RETRIES attempts the last
    error propagates; any other exception propagates immediately.

    Args:
        operation: Zero-argument callable making one API request
        retryable: Exception classes that trigger a retry
        label: Provider name for log lines
    """
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            return operation()
        except retryable as e:
            if attempt == MAX_RETRIES:
                raise
            delay = BASE_DELAY * 2 ** (attempt - 1)
            logger.warning(
                f"{label}: {type(e).__name__}, retrying in {delay:.1f}s "
                f"(attempt {attempt}/{MAX_RETRIES})"
            )
            time.sleep(delay)


def _import_sdk(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except ImportError as e:
        raise ImportError(
            f"{name} package required. Install with: pip install statusdeck[llm]"
        ) from e


@dataclass
class LLMResponse:
    """
    One provider reply.

    Attributes:
        content: Reply text (for JSON requests, the whole JSON object)
        truncated: True when generation stopped at max_tokens, so the JSON
            is almost certainly incomplete
    """

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    truncated: bool = False


class LLMProvider(ABC):
    """
    Base class for SDK-backed providers.

    Subclasses set sdk_name, api_key_env and default_model, build the SDK
    client in _create_client() and make one request in _request().
    """

    sdk_name: str
    api_key_env: str
    default_model: str

    def __init__(self, model: Optional[str] = None, max_tokens: int = DEFAULT_MAX_TOKENS):
        self.sdk = _import_sdk(self.sdk_name)

        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ValueError(f"{self.api_key_env} environment variable not set")

        self.client = self._create_client(api_key)
        self.model = model or self.default_model
        self.max_tokens = max_tokens
        self.retryable = transient_errors(self.sdk)

    @property
    def name(self) -> str:
        return f"{self.sdk_name}/{self.model}"

    @abstractmethod
    def _create_client(self, api_key: str) -> Any:
        """Build the SDK client."""

    @abstractmethod
    def _request(self, system_prompt: str, user_prompt: str, json_output: bool) -> LLMResponse:
        """Make a single API call (no retries)."""

    def generate(
        self, system_prompt: str, user_prompt: str, json_output: bool = False
    ) -> LLMResponse:
        """
        Generate a reply, retrying transient SDK errors.

        Args:
            system_prompt: Instructions, including the expected JSON shape
            user_prompt: The material to extract from
            json_output: Constrain the reply to a single JSON object
        """
        response = call_with_retry(
            partial(self._request, system_prompt, user_prompt, json_output),
            self.retryable,
            self.name,
        )
        if response.truncated:
            logger.warning(f"{self.name}: reply stopped at max_tokens={self.max_tokens}")
        return response


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API. JSON output is forced by prefilling the reply with "{"."""

    sdk_name = "anthropic"
    api_key_env = "ANTHROPIC_API_KEY"
    default_model = "claude-sonnet-4-20250514"

    JSON_PREFILL = "{"

    def _create_client(self, api_key: str) -> Any:
        return self.sdk.Anthropic(api_key=api_key)

    def _request(self, system_prompt: str, user_prompt: str, json_output: bool) -> LLMResponse:
        messages = [{"role": "user", "content": user_prompt}]
        if json_output:
            messages.append({"role": "assistant", "content": self.JSON_PREFILL})

        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=messages,
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        return LLMResponse(
            content=self.JSON_PREFILL + text if json_output else text,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            truncated=response.stop_reason == "max_tokens",
        )


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API. JSON output uses response_format=json_object."""

    sdk_name = "openai"
    api_key_env = "OPENAI_API_KEY"
    default_model = "gpt-4o"

    def _create_client(self, api_key: str) -> Any:
        return self.sdk.OpenAI(api_key=api_key)

    def _request(self, system_prompt: str, user_prompt: str, json_output: bool) -> LLMResponse:
        options: Dict[str, Any] = {}
        if json_output:
            # The API requires the word "JSON" in the prompt for this mode
            options["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **options,
        )
        choice = response.choices[0]
        return LLMResponse(
            content=choice.message.content or "",
            model=self.model,
            input_tokens=response.usage.prompt_tokens,
            output_tokens=response.usage.completion_tokens,
            truncated=choice.finish_reason == "length",
        )


PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def get_provider(provider_name: Optional[str] = None, model: Optional[str] = None) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_name: Key of PROVIDERS (default: LLM_PROVIDER env var, else "anthropic")
        model: Model name (default: the provider's default_model)

    Raises:
        ValueError: Unknown provider or missing API key
        ImportError: The provider's SDK is not installed
    """
    name = (provider_name or os.getenv("LLM_PROVIDER", "anthropic")).lower()
    provider_class = PROVIDERS.get(name)
    if provider_class is None:
        raise ValueError(f"Unknown provider: {name}. Use one of: {', '.join(PROVIDERS)}")
    return provider_class(model=model)


def parse_json_object(text: str) -> Optional[dict[str, Any]]:
    """
    Parse a JSON object out of an LLM response.

    Tries, in order: the raw text, the body of a ```json fenced block, and the
    outermost {...} span. Returns None when none of them is a JSON object.
    """
    text = text.strip()
    candidates = [text]

    fenced = re.search(r"```(?:json)?\s*\n?(.*?)\n?\s*```", text, re.DOTALL)
    if fenced:
        candidates.append(fenced.group(1))

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, dict):
            return result

    return None
