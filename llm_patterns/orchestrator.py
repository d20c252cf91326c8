from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional

import pandas as pd

from llm_patterns.patterns import PatternRegistry
from llm_patterns.providers import LLMProvider, MalformedResponseError
from llm_patterns.types import GenerationRequest, RunResult

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response"

EXPORT_COLUMNS = [
    "pattern_id",
    "pattern_name",
    "timestamp",
    "used_context",
    "is_error",
    "rendered_prompt",
    "output",
]


class PatternOrchestrator:
    """Runs selected prompt patterns against a provider and keeps per-pattern results.

    State (selection, results, in-flight flags) is owned here and only changed
    through the public operations; readers get copies.
    """

    def __init__(
        self,
        provider: LLMProvider,
        registry: Optional[PatternRegistry] = None,
        *,
        selection: Optional[Iterable[str]] = None,
        on_change: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.provider = provider
        self.registry = registry or PatternRegistry()
        self.on_change = on_change
        self._clock = clock

        self._lock = threading.Lock()
        self._prompt = ""
        self._context = ""
        self._selection: list[str] = []
        self._results: dict[str, RunResult] = {}
        self._in_flight: dict[str, bool] = {}

        for pattern_id in selection or []:
            self.registry.get(pattern_id)
            if pattern_id not in self._selection:
                self._selection.append(pattern_id)

    # ---------------- Inputs / selection ----------------

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def context(self) -> str:
        return self._context

    def set_inputs(self, prompt: str, context: str = "") -> None:
        with self._lock:
            self._prompt = prompt or ""
            self._context = context or ""

    @property
    def selection(self) -> list[str]:
        with self._lock:
            return list(self._selection)

    def toggle_selection(self, pattern_id: str) -> bool:
        """Add or remove a pattern; returns True if it is selected afterwards."""
        self.registry.get(pattern_id)
        with self._lock:
            if pattern_id in self._selection:
                self._selection.remove(pattern_id)
                selected = False
            else:
                self._selection.append(pattern_id)
                selected = True
        return selected

    def can_run(self) -> bool:
        with self._lock:
            return bool(self._prompt.strip()) and bool(self._selection)

    # ---------------- State readers ----------------

    @property
    def results(self) -> dict[str, RunResult]:
        with self._lock:
            return dict(self._results)

    def result_for(self, pattern_id: str) -> Optional[RunResult]:
        with self._lock:
            return self._results.get(pattern_id)

    def is_in_flight(self, pattern_id: str) -> bool:
        with self._lock:
            return self._in_flight.get(pattern_id, False)

    # ---------------- Runs ----------------

    def run_pattern(self, pattern_id: str) -> Optional[RunResult]:
        """Run one pattern with the current inputs.

        Returns None when skipped (blank prompt, or the pattern is already in flight).
        Provider and parsing failures are stored as error results, never raised.
        """
        with self._lock:
            prompt, context = self._prompt, self._context
        return self._run_with_inputs(pattern_id, prompt, context)

    def _run_with_inputs(self, pattern_id: str, prompt: str, context: str) -> Optional[RunResult]:
        pattern = self.registry.get(pattern_id)

        with self._lock:
            if not prompt.strip():
                return None
            if self._in_flight.get(pattern_id, False):
                logger.warning("Pattern '%s' is already running; ignoring new run", pattern_id)
                return None
            self._in_flight[pattern_id] = True

        used_context = bool(context)
        rendered = ""
        result: Optional[RunResult] = None
        try:
            self._notify(pattern_id)
            rendered = pattern.transform(prompt, context)
            logger.info("Running pattern '%s' (context: %s)", pattern_id, used_context)
            body = self.provider.generate(
                GenerationRequest(system=pattern.system_instruction, prompt=rendered)
            )
            result = RunResult(
                output=self.aggregate_text(body),
                timestamp=self._clock(),
                used_context=used_context,
                rendered_prompt=rendered,
            )
        except Exception as e:
            logger.exception("Pattern '%s' failed", pattern_id)
            result = RunResult(
                output=f"Error: {e}",
                timestamp=self._clock(),
                used_context=used_context,
                is_error=True,
                rendered_prompt=rendered,
            )
        finally:
            with self._lock:
                if result is not None:
                    self._results[pattern_id] = result
                self._in_flight[pattern_id] = False
            self._notify(pattern_id)
        return result

    def run_selected(self) -> list[RunResult]:
        """Run every selected pattern, one after another, in selection order.

        Prompt and context are read once, so edits made during the batch
        only apply to the next run.
        """
        with self._lock:
            selection = list(self._selection)
            prompt, context = self._prompt, self._context
        results: list[RunResult] = []
        for pattern_id in selection:
            result = self._run_with_inputs(pattern_id, prompt, context)
            if result is not None:
                results.append(result)
        logger.info("Batch completed: %d/%d pattern(s) run", len(results), len(selection))
        return results

    # ---------------- Response handling ----------------

    @staticmethod
    def aggregate_text(body: Any) -> str:
        """Join the `text` of every content block with newlines."""
        if not isinstance(body, Mapping):
            raise MalformedResponseError(
                f"Expected a response object, got {type(body).__name__}"
            )
        content = body.get("content")
        if content is None:
            return NO_RESPONSE
        if not isinstance(content, list):
            raise MalformedResponseError(
                f"Expected 'content' to be a list, got {type(content).__name__}"
            )

        texts = [
            block["text"]
            for block in content
            if isinstance(block, Mapping) and isinstance(block.get("text"), str) and block["text"]
        ]
        return "\n".join(texts) or NO_RESPONSE

    def _notify(self, pattern_id: str) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(pattern_id)
        except Exception:
            # listener failures never affect run state
            logger.exception("on_change listener failed for pattern '%s'", pattern_id)

    # ---------------- Export ----------------

    def results_to_dataframe(self) -> pd.DataFrame:
        """Current results as a table, in registry order."""
        results = self.results
        rows = [
            results[pattern.pattern_id].to_export_row(pattern.pattern_id, pattern.name)
            for pattern in self.registry
            if pattern.pattern_id in results
        ]
        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)
