from __future__ import annotations

import json
import os
import tempfile
from dataclasses import asdict
from typing import Any, Optional

from llm_patterns.patterns import PatternRegistry, UnknownPatternError
from llm_patterns.providers import (
    DEFAULT_API_BASE_URL,
    DEFAULT_API_KEY_ENV,
    DEFAULT_API_MODEL,
    DEFAULT_MAX_TOKENS,
)
from llm_patterns.types import LLMProviderDefinition, PlaygroundConfig, ProviderKind


class ConfigValidationError(ValueError):
    pass


def _provider_from_dict(d: dict[str, Any]) -> LLMProviderDefinition:
    try:
        kind = ProviderKind(d["kind"])
    except ValueError:
        raise ConfigValidationError(
            f"Unknown provider kind '{d['kind']}' for provider_id='{d['provider_id']}'"
        ) from None
    return LLMProviderDefinition(
        provider_id=d["provider_id"],
        kind=kind,
        display_name=d.get("display_name", d["provider_id"]),
        config=dict(d.get("config", {})),
    )


def default_config() -> PlaygroundConfig:
    return PlaygroundConfig(
        schema_version=1,
        providers=[
            LLMProviderDefinition(
                provider_id="anthropic",
                kind=ProviderKind.API,
                display_name="Anthropic Messages API",
                config={
                    "model_name": DEFAULT_API_MODEL,
                    "max_tokens": DEFAULT_MAX_TOKENS,
                    "base_url": DEFAULT_API_BASE_URL,
                    "api_key_env": DEFAULT_API_KEY_ENV,
                },
            ),
            LLMProviderDefinition(
                provider_id="local-ollama",
                kind=ProviderKind.LOCAL,
                display_name="Ollama (local)",
                config={"model_name": "llama3.1:8b"},
            ),
        ],
        default_selection=["basic", "structured"],
    )


class PlaygroundConfigStore:
    """Loads/saves the playground configuration (providers + default selection) from JSON."""

    def __init__(
        self,
        file_path: str = os.path.join("config", "playground.json"),
        registry: Optional[PatternRegistry] = None,
    ):
        self.file_path = file_path
        self.registry = registry or PatternRegistry()

    def exists(self) -> bool:
        return os.path.exists(self.file_path)

    def load(self) -> PlaygroundConfig:
        with open(self.file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        providers = [_provider_from_dict(x) for x in data.get("providers", [])]
        selection = list(data.get("default_selection", ["basic", "structured"]))
        try:
            self.registry.validate_ids(selection)
        except UnknownPatternError as e:
            raise ConfigValidationError(f"Invalid default_selection: {e}") from None

        return PlaygroundConfig(
            schema_version=int(data.get("schema_version", 1)),
            providers=providers,
            default_selection=selection,
        )

    def save(self, config: PlaygroundConfig) -> None:
        os.makedirs(os.path.dirname(self.file_path) or ".", exist_ok=True)

        payload = asdict(config)
        for p in payload.get("providers", []):
            if isinstance(p.get("kind"), ProviderKind):
                p["kind"] = p["kind"].value

        json_text = json.dumps(payload, ensure_ascii=False, indent=2)

        # write to temp file then replace
        dir_name = os.path.dirname(self.file_path) or "."
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", delete=False, dir=dir_name, suffix=".tmp"
        ) as tmp:
            tmp.write(json_text)
            tmp_path = tmp.name

        os.replace(tmp_path, self.file_path)

    def ensure_exists(self, seed: Optional[PlaygroundConfig] = None) -> PlaygroundConfig:
        if self.exists():
            return self.load()

        config = seed or default_config()
        self.save(config)
        return config
