from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ProviderKind(str, Enum):
    LOCAL = "local"
    API = "api"


@dataclass
class LLMProviderDefinition:
    """Persisted configuration for a provider selectable from UI."""

    provider_id: str
    kind: ProviderKind
    display_name: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass
class PlaygroundConfig:
    """Root persisted object (providers + initial pattern selection)."""

    schema_version: int = 1
    providers: list[LLMProviderDefinition] = field(default_factory=list)
    default_selection: list[str] = field(default_factory=lambda: ["basic", "structured"])

    def get_provider(self, provider_id: str) -> LLMProviderDefinition:
        for provider in self.providers:
            if provider.provider_id == provider_id:
                return provider
        raise KeyError(f"Unknown provider_id: {provider_id}")


@dataclass(frozen=True)
class GenerationRequest:
    """What the orchestrator hands to a provider: system instruction + one user turn."""

    system: str
    prompt: str

    @property
    def messages(self) -> list[dict[str, str]]:
        return [{"role": "user", "content": self.prompt}]


@dataclass(frozen=True)
class RunResult:
    """Outcome of one pattern run, success or failure."""

    output: str
    timestamp: datetime
    used_context: bool
    is_error: bool = False
    rendered_prompt: str = ""

    @property
    def time_label(self) -> str:
        return self.timestamp.strftime("%H:%M:%S")

    def to_export_row(self, pattern_id: str, pattern_name: str) -> dict[str, Any]:
        return {
            "pattern_id": pattern_id,
            "pattern_name": pattern_name,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "used_context": self.used_context,
            "is_error": self.is_error,
            "rendered_prompt": self.rendered_prompt,
            "output": self.output,
        }
