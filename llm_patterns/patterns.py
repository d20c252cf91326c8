"""Built-in prompt patterns and the registry that exposes them.

Each pattern is a small class carrying its display metadata, the system
instruction sent alongside the prompt, and a pure `transform(prompt, context)`.
Adding a pattern only requires a new subclass listed in `BUILTIN_PATTERNS`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Iterable, Iterator, Optional, Sequence


class UnknownPatternError(KeyError):
    pass


class DuplicatePatternError(ValueError):
    pass


def _with_context(prompt: str, context: str) -> str:
    return f"Context: {context}\n\nTask: {prompt}" if context else prompt


class PromptPattern(ABC):
    """A named prompt-transformation strategy paired with a system instruction."""

    pattern_id: str = ""
    name: str = ""
    description: str = ""
    system_instruction: str = ""
    color: str = "#64748b"

    @abstractmethod
    def transform(self, prompt: str, context: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(pattern_id={self.pattern_id!r})"


class BasicPattern(PromptPattern):
    pattern_id = "basic"
    name = "Basic Prompt"
    description = "Direct prompt without any special techniques"
    system_instruction = "You are a helpful AI assistant."
    color = "#3b82f6"

    def transform(self, prompt: str, context: str) -> str:
        return _with_context(prompt, context)


class StructuredPattern(PromptPattern):
    pattern_id = "structured"
    name = "Structured Output"
    description = "Request specific format (JSON, lists, etc.)"
    system_instruction = (
        "You are a helpful AI assistant. Provide responses in clear, structured formats."
    )
    color = "#a855f7"

    def transform(self, prompt: str, context: str) -> str:
        return (
            f"{_with_context(prompt, context)}\n\n"
            "Provide your response in a clear, structured format with headers and bullet points."
        )


class ChainOfThoughtPattern(PromptPattern):
    pattern_id = "cot"
    name = "Chain of Thought"
    description = "Ask model to show its reasoning process"
    system_instruction = (
        "You are a helpful AI assistant. Show your thinking process step by step."
    )
    color = "#f59e0b"

    def transform(self, prompt: str, context: str) -> str:
        return f"{_with_context(prompt, context)}\n\nLet's think through this step by step:"


class FewShotPattern(PromptPattern):
    pattern_id = "fewshot"
    name = "Few-Shot Learning"
    description = "Provide examples before the actual task"
    system_instruction = (
        "You are a helpful AI assistant. Follow the pattern shown in the examples."
    )
    color = "#22c55e"

    EXAMPLES = (
        "Here are some examples:\n\n"
        'Example 1: Input: "analyze user feedback"\n'
        "Output: Categorized into: Bugs (2), Feature Requests (3), Praise (1)\n\n"
        'Example 2: Input: "summarize quarterly report"\n'
        "Output: Key metrics, Highlights, Action items in bullet format"
    )

    def transform(self, prompt: str, context: str) -> str:
        context_part = f"\n\nContext for your task: {context}" if context else ""
        return f"{self.EXAMPLES}{context_part}\n\nNow, for the following:\n{prompt}"


class PersonaPattern(PromptPattern):
    pattern_id = "persona"
    name = "Persona Pattern"
    description = "Give the AI a specific role/expertise"
    system_instruction = (
        "You are an experienced product manager with 15 years at top tech companies. "
        "You ground your responses in specific details when context is provided, "
        "and clearly indicate when you need more information."
    )
    color = "#ec4899"

    FRAMING = "As a senior product manager,"

    def transform(self, prompt: str, context: str) -> str:
        context_part = f"\n\nProduct/Company Context:\n{context}\n\n" if context else "\n\n"
        return f"{self.FRAMING}{context_part}{prompt.lower()}"


BUILTIN_PATTERNS: tuple[type[PromptPattern], ...] = (
    BasicPattern,
    StructuredPattern,
    ChainOfThoughtPattern,
    FewShotPattern,
    PersonaPattern,
)


class PatternRegistry:
    """Immutable, ordered mapping pattern_id -> PromptPattern."""

    def __init__(self, patterns: Optional[Sequence[PromptPattern]] = None):
        if patterns is None:
            patterns = [cls() for cls in BUILTIN_PATTERNS]

        by_id: dict[str, PromptPattern] = {}
        for pattern in patterns:
            if not pattern.pattern_id:
                raise ValueError(f"Pattern without pattern_id: {pattern!r}")
            if pattern.pattern_id in by_id:
                raise DuplicatePatternError(
                    f"Duplicate pattern_id: {pattern.pattern_id}"
                )
            by_id[pattern.pattern_id] = pattern
        self._patterns = MappingProxyType(by_id)

    def get(self, pattern_id: str) -> PromptPattern:
        try:
            return self._patterns[pattern_id]
        except KeyError:
            raise UnknownPatternError(f"Unknown pattern_id: {pattern_id}") from None

    def ids(self) -> list[str]:
        return list(self._patterns)

    def validate_ids(self, pattern_ids: Iterable[str]) -> None:
        for pattern_id in pattern_ids:
            self.get(pattern_id)

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._patterns

    def __iter__(self) -> Iterator[PromptPattern]:
        return iter(self._patterns.values())

    def __len__(self) -> int:
        return len(self._patterns)
