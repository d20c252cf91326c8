from datetime import datetime

import pytest

from llm_patterns.types import (
    GenerationRequest,
    LLMProviderDefinition,
    PlaygroundConfig,
    ProviderKind,
    RunResult,
)


def test_generation_request_messages_single_user_turn():
    req = GenerationRequest(system="sys", prompt="hello")
    assert req.messages == [{"role": "user", "content": "hello"}]


def test_run_result_time_label_and_export_row():
    result = RunResult(
        output="out",
        timestamp=datetime(2024, 5, 1, 9, 7, 3),
        used_context=True,
        rendered_prompt="rp",
    )
    assert result.time_label == "09:07:03"
    assert result.is_error is False

    row = result.to_export_row("basic", "Basic Prompt")
    assert row == {
        "pattern_id": "basic",
        "pattern_name": "Basic Prompt",
        "timestamp": "2024-05-01T09:07:03",
        "used_context": True,
        "is_error": False,
        "rendered_prompt": "rp",
        "output": "out",
    }


def test_run_result_is_immutable():
    result = RunResult(output="x", timestamp=datetime.now(), used_context=False)
    with pytest.raises(AttributeError):
        result.output = "y"  # type: ignore[misc]


def test_playground_config_defaults_and_get_provider():
    cfg = PlaygroundConfig()
    assert cfg.default_selection == ["basic", "structured"]
    assert cfg.providers == []

    cfg.providers.append(
        LLMProviderDefinition(provider_id="p1", kind=ProviderKind.API, display_name="P1")
    )
    assert cfg.get_provider("p1").display_name == "P1"
    with pytest.raises(KeyError):
        cfg.get_provider("missing")


def test_provider_kind_is_str_enum():
    assert ProviderKind("api") is ProviderKind.API
    assert ProviderKind.LOCAL == "local"
