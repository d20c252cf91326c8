"""
Minimal end-to-end: config -> build_provider -> PatternOrchestrator
Checks that a batch reaches the HTTP layer with the Messages payload and that
responses and failures are stored per pattern.
"""

import sys
import types

from llm_patterns.config_store import PlaygroundConfigStore
from llm_patterns.orchestrator import PatternOrchestrator
from llm_patterns.providers import build_provider


class FakeHTTPStatusError(Exception):
    pass


def _install_fake_httpx(monkeypatch, handler):
    """handler(payload) -> (status_code, body)"""
    posted = []

    class Resp:
        def __init__(self, status, body):
            self.status_code = status
            self._body = body

        def raise_for_status(self):
            if self.status_code >= 400:
                raise FakeHTTPStatusError(f"Client error '{self.status_code}' for url")

        def json(self):
            return self._body

    class Client:
        def __init__(self, timeout):
            self.timeout = timeout

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def post(self, url, json, headers):
            posted.append({"url": url, "json": json, "headers": headers})
            return Resp(*handler(json))

    monkeypatch.setitem(sys.modules, "httpx", types.SimpleNamespace(Client=Client))
    return posted


def _orchestrator_from_default_config(tmp_path, selection):
    config = PlaygroundConfigStore(file_path=str(tmp_path / "playground.json")).ensure_exists()
    provider = build_provider(config.get_provider("anthropic"))
    return PatternOrchestrator(provider=provider, selection=selection)


def test_batch_run_posts_one_request_per_pattern_in_order(tmp_path, monkeypatch):
    """Two selected patterns -> two sequential POSTs, two results without context."""
    posted = _install_fake_httpx(
        monkeypatch,
        lambda payload: (200, {"content": [{"type": "text", "text": payload["system"]}]}),
    )
    orch = _orchestrator_from_default_config(tmp_path, ["basic", "cot"])
    orch.set_inputs("Write a tagline", "")

    results = orch.run_selected()

    assert len(results) == 2
    assert [p["url"] for p in posted] == ["https://api.anthropic.com/v1/messages"] * 2
    assert posted[0]["json"]["messages"] == [{"role": "user", "content": "Write a tagline"}]
    assert posted[1]["json"]["messages"][0]["content"].endswith("Let's think through this step by step:")
    assert all(p["json"]["max_tokens"] == 1000 for p in posted)

    assert orch.result_for("basic").output == "You are a helpful AI assistant."
    assert orch.result_for("cot").output.endswith("Show your thinking process step by step.")
    assert all(r.used_context is False for r in orch.results.values())


def test_batch_run_isolates_http_failure(tmp_path, monkeypatch):
    """A 500 on one pattern becomes an error result; the other pattern still succeeds."""

    def handler(payload):
        if "structured" in payload["system"]:
            return 500, {"type": "error"}
        return 200, {"content": [{"text": "A"}, {"text": "B"}]}

    _install_fake_httpx(monkeypatch, handler)
    orch = _orchestrator_from_default_config(tmp_path, ["structured", "persona"])
    orch.set_inputs("Write a tagline", "Acme Corp, a widget maker")

    orch.run_selected()

    failed = orch.result_for("structured")
    assert failed.is_error is True
    assert failed.output.startswith("Error: ")
    assert "500" in failed.output
    assert orch.is_in_flight("structured") is False

    ok = orch.result_for("persona")
    assert ok.output == "A\nB"
    assert ok.used_context is True
