import json

import pytest

from llm_patterns.config_store import (
    ConfigValidationError,
    PlaygroundConfigStore,
    default_config,
)
from llm_patterns.types import LLMProviderDefinition, PlaygroundConfig, ProviderKind


def test_config_store_save_and_load_roundtrip(tmp_path):
    path = tmp_path / "playground.json"
    store = PlaygroundConfigStore(file_path=str(path))

    config = PlaygroundConfig(
        schema_version=1,
        providers=[
            LLMProviderDefinition(
                provider_id="p1",
                kind=ProviderKind.LOCAL,
                display_name="Local",
                config={"model_name": "x"},
            )
        ],
        default_selection=["cot", "persona"],
    )

    assert store.exists() is False
    store.save(config)
    assert store.exists() is True

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["providers"][0]["kind"] == "local"

    loaded = store.load()
    assert loaded.schema_version == 1
    assert loaded.default_selection == ["cot", "persona"]
    assert len(loaded.providers) == 1
    assert loaded.providers[0].kind == ProviderKind.LOCAL
    assert loaded.providers[0].config["model_name"] == "x"


def test_config_store_load_applies_defaults(tmp_path):
    path = tmp_path / "playground.json"
    path.write_text(
        json.dumps({"providers": [{"provider_id": "a", "kind": "api"}]}),
        encoding="utf-8",
    )

    loaded = PlaygroundConfigStore(file_path=str(path)).load()
    assert loaded.schema_version == 1
    assert loaded.default_selection == ["basic", "structured"]
    assert loaded.providers[0].display_name == "a"
    assert loaded.providers[0].config == {}


def test_config_store_rejects_unknown_provider_kind(tmp_path):
    path = tmp_path / "playground.json"
    path.write_text(
        json.dumps({"providers": [{"provider_id": "a", "kind": "grpc"}]}),
        encoding="utf-8",
    )

    with pytest.raises(ConfigValidationError, match="Unknown provider kind 'grpc'"):
        PlaygroundConfigStore(file_path=str(path)).load()


def test_config_store_rejects_unknown_default_selection(tmp_path):
    path = tmp_path / "playground.json"
    path.write_text(json.dumps({"default_selection": ["basic", "tree-of-thought"]}), encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="tree-of-thought"):
        PlaygroundConfigStore(file_path=str(path)).load()


def test_ensure_exists_seeds_default_config(tmp_path):
    path = tmp_path / "nested" / "playground.json"
    store = PlaygroundConfigStore(file_path=str(path))

    config = store.ensure_exists()

    assert path.exists()
    assert [p.provider_id for p in config.providers] == ["anthropic", "local-ollama"]
    assert config.providers[0].kind == ProviderKind.API
    assert config.providers[0].config["model_name"] == "claude-sonnet-4-20250514"
    assert config.providers[0].config["max_tokens"] == 1000
    assert config.default_selection == ["basic", "structured"]


def test_ensure_exists_loads_existing_file_without_overwriting(tmp_path):
    path = tmp_path / "playground.json"
    store = PlaygroundConfigStore(file_path=str(path))
    seed = PlaygroundConfig(providers=[], default_selection=["fewshot"])
    store.save(seed)

    config = store.ensure_exists(seed=default_config())
    assert config.providers == []
    assert config.default_selection == ["fewshot"]
