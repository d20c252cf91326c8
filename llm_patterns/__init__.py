"""Prompt pattern comparison core.

Kept independent from any UI so the registry and the orchestrator can be used
(and tested) without a display:
- `patterns`: the built-in prompt patterns and their registry.
- `providers`: bridge to the text-generation service.
- `orchestrator`: selection, per-pattern runs, results.
"""

from .types import (
    GenerationRequest,
    LLMProviderDefinition,
    PlaygroundConfig,
    ProviderKind,
    RunResult,
)
from .patterns import (
    BUILTIN_PATTERNS,
    DuplicatePatternError,
    PatternRegistry,
    PromptPattern,
    UnknownPatternError,
)
from .providers import (
    AnthropicLLMProvider,
    LLMProvider,
    LocalLLMProvider,
    MalformedResponseError,
    MockLLMProvider,
    build_provider,
)
from .config_store import ConfigValidationError, PlaygroundConfigStore
from .orchestrator import PatternOrchestrator

__all__ = [
    "GenerationRequest",
    "LLMProviderDefinition",
    "PlaygroundConfig",
    "ProviderKind",
    "RunResult",
    "BUILTIN_PATTERNS",
    "DuplicatePatternError",
    "PatternRegistry",
    "PromptPattern",
    "UnknownPatternError",
    "AnthropicLLMProvider",
    "LLMProvider",
    "LocalLLMProvider",
    "MalformedResponseError",
    "MockLLMProvider",
    "build_provider",
    "ConfigValidationError",
    "PlaygroundConfigStore",
    "PatternOrchestrator",
]
