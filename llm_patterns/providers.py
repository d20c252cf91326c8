from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from llm_patterns.types import GenerationRequest, LLMProviderDefinition, ProviderKind

ResponseBody = dict[str, Any]

DEFAULT_API_BASE_URL = "https://api.anthropic.com"
DEFAULT_API_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_API_KEY_ENV = "ANTHROPIC_API_KEY"
ANTHROPIC_VERSION = "2023-06-01"


class MalformedResponseError(ValueError):
    pass


def text_body(text: str) -> ResponseBody:
    """Wrap plain text into the content-block shape returned by the Messages API."""
    return {"content": [{"type": "text", "text": text}]}


class LLMProvider(ABC):
    """Bridge implementor: concrete providers only turn a request into a response body.

    The body follows the Messages API shape: {"content": [{"text": ...}, ...]}.
    """

    @abstractmethod
    def generate(self, request: GenerationRequest) -> ResponseBody:
        raise NotImplementedError


@dataclass
class MockLLMProvider(LLMProvider):
    """Deterministic provider for tests.

    Precedence: `error` (raised), then `response_factory`, then `fixed_response`.
    A factory may return either plain text or a full response body.
    """

    fixed_response: Optional[Union[str, ResponseBody]] = None
    response_factory: Optional[Callable[[GenerationRequest], Union[str, ResponseBody]]] = None
    error: Optional[Exception] = None

    def __post_init__(self) -> None:
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> ResponseBody:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.response_factory is not None:
            return self._as_body(self.response_factory(request))
        if self.fixed_response is not None:
            return self._as_body(self.fixed_response)
        raise ValueError("MockLLMProvider requires fixed_response or response_factory")

    @staticmethod
    def _as_body(value: Union[str, ResponseBody]) -> ResponseBody:
        return text_body(value) if isinstance(value, str) else value


class LocalLLMProvider(LLMProvider):
    """Ollama-backed provider; the dependency is imported lazily."""

    def __init__(
        self,
        model_name: str,
        host: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        self.model_name = model_name
        self.host = host
        self.options = options

    def generate(self, request: GenerationRequest) -> ResponseBody:
        try:
            import ollama  # lazy import
        except Exception as e:
            raise RuntimeError(
                "ollama is not available; cannot use LocalLLMProvider"
            ) from e

        kwargs: dict[str, Any] = {
            "model": self.model_name,
            "prompt": request.prompt,
            "system": request.system,
            "options": self.options,
        }
        try:
            if self.host:
                response = ollama.Client(host=self.host).generate(**kwargs)
            else:
                response = ollama.generate(**kwargs)
        except Exception as e:
            host_hint = f" ({self.host})" if self.host else ""
            raise RuntimeError(
                "Failed to connect to Ollama server" + host_hint + ". "
                "Ensure Ollama is installed and running (default: http://localhost:11434)."
            ) from e
        return text_body(str(response.get("response", "")))


class AnthropicLLMProvider(LLMProvider):
    """Calls the Anthropic Messages endpoint over plain HTTP.

    The API key is read from the environment at call time; when the variable is
    unset the request is sent without it and the service decides.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_API_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        base_url: str = DEFAULT_API_BASE_URL,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        timeout_s: Optional[float] = None,
    ):
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.base_url = base_url.rstrip("/")
        self.api_key_env = api_key_env
        self.timeout_s = timeout_s

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "system": request.system,
            "messages": request.messages,
        }

    def build_headers(self) -> dict[str, str]:
        headers = {
            "content-type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        api_key = os.environ.get(self.api_key_env)
        if api_key:
            headers["x-api-key"] = api_key
        return headers

    def generate(self, request: GenerationRequest) -> ResponseBody:
        try:
            import httpx  # lazy import
        except Exception as e:
            raise RuntimeError(
                "httpx is not available; cannot use AnthropicLLMProvider"
            ) from e

        url = f"{self.base_url}/v1/messages"
        with httpx.Client(timeout=self.timeout_s) as client:
            resp = client.post(url, json=self.build_payload(request), headers=self.build_headers())
            resp.raise_for_status()
            try:
                data = resp.json()
            except ValueError as e:
                raise MalformedResponseError(f"Response body is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(data).__name__}"
            )
        return data


def build_provider(definition: LLMProviderDefinition) -> LLMProvider:
    """Instantiate the provider described by a config entry."""
    config = definition.config

    if definition.kind == ProviderKind.LOCAL:
        host = config.get("host") or config.get("base_url")
        options_val = config.get("options")
        return LocalLLMProvider(
            model_name=str(config.get("model_name") or "llama3.1:8b"),
            host=str(host) if host else None,
            options=dict(options_val) if isinstance(options_val, dict) else None,
        )

    if definition.kind == ProviderKind.API:
        timeout = config.get("timeout_s")
        return AnthropicLLMProvider(
            model_name=str(config.get("model_name") or DEFAULT_API_MODEL),
            max_tokens=int(config.get("max_tokens") or DEFAULT_MAX_TOKENS),
            base_url=str(config.get("base_url") or DEFAULT_API_BASE_URL),
            api_key_env=str(config.get("api_key_env") or DEFAULT_API_KEY_ENV),
            timeout_s=float(timeout) if timeout is not None else None,
        )

    raise ValueError(f"Unsupported provider kind: {definition.kind}")
