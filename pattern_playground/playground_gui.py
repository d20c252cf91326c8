from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from tkinter.scrolledtext import ScrolledText

from llm_patterns.config_store import PlaygroundConfigStore
from llm_patterns.logger import get_logger
from llm_patterns.orchestrator import PatternOrchestrator
from llm_patterns.patterns import PatternRegistry
from llm_patterns.providers import LLMProvider, build_provider
from llm_patterns.types import LLMProviderDefinition, ProviderKind

logger = logging.getLogger(__name__)

CONTEXT_TIP = (
    "Pro Tip: Add Context. Without context, AI will make up plausible-sounding details. "
    "Try adding your product/company info below to see more accurate, relevant responses."
)
PLACEHOLDER = "Run this pattern to see results"
RUNNING = "Running..."
CONCEPTS = [
    (
        "Context is Critical",
        'Without specific context, AI will "hallucinate" plausible details. This is why RAG '
        "(Retrieval Augmented Generation) matters in production systems.",
    ),
    (
        "Prompt Engineering Impact",
        "Different techniques produce vastly different outputs. PMs need to understand which "
        "patterns work best for specific use cases.",
    ),
    (
        "Evaluation is Key",
        "Side-by-side comparison shows why AI PMs need systematic evaluation frameworks. "
        "What looks good at first glance may not be most accurate.",
    ),
]


class _UnconfiguredProvider(LLMProvider):
    def generate(self, request):
        raise RuntimeError("No LLM provider configured")


@dataclass
class _ResultPanel:
    frame: tk.Frame
    meta_label: ttk.Label
    output_text: ScrolledText
    run_btn: ttk.Button


class PatternPlaygroundGUI:
    def __init__(
        self,
        master: tk.Tk,
        config_store: Optional[PlaygroundConfigStore] = None,
        provider_factory: Callable[[LLMProviderDefinition], LLMProvider] = build_provider,
        registry: Optional[PatternRegistry] = None,
    ):
        self.master = master
        self.registry = registry or PatternRegistry()
        self.config_store = config_store or PlaygroundConfigStore(registry=self.registry)
        self.config = self.config_store.ensure_exists()
        self._provider_factory = provider_factory

        # --- state ---
        self._provider_display_to_id: dict[str, str] = {}
        self._selected_provider_id: Optional[str] = None
        self._running: bool = False
        self._pattern_vars: dict[str, tk.BooleanVar] = {}
        self._pattern_checks: dict[str, ttk.Checkbutton] = {}
        self._panels: dict[str, _ResultPanel] = {}

        self.orchestrator = PatternOrchestrator(
            provider=_UnconfiguredProvider(),
            registry=self.registry,
            selection=self.config.default_selection,
            on_change=self._on_orchestrator_change,
        )

        # --- ui ---
        self._build_ui()
        self._load_providers_into_dropdown()
        self._rebuild_result_panels()
        self._on_inputs_changed()

        self.master.protocol("WM_DELETE_WINDOW", self._on_close)

    # ---------------- UI ----------------

    def _build_ui(self) -> None:
        self.master.title("AI Feature Playground")
        self.master.geometry("1100x800")
        self.master.grid_columnconfigure(0, weight=1)

        header = ttk.Frame(self.master)
        header.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 4))
        ttk.Label(header, text="AI Feature Playground", font=("TkDefaultFont", 16, "bold")).grid(
            row=0, column=0, sticky="w"
        )
        ttk.Label(
            header,
            text="Experiment with different AI prompt patterns and see how they affect outputs",
            foreground="#444",
        ).grid(row=1, column=0, sticky="w")

        self._context_tip = ttk.Label(self.master, text=CONTEXT_TIP, foreground="#92400e", wraplength=1000)
        self._context_tip.grid(row=1, column=0, sticky="ew", padx=10, pady=(0, 6))

        # Inputs
        inputs = ttk.LabelFrame(self.master, text="Input")
        inputs.grid(row=2, column=0, sticky="ew", padx=10)
        inputs.grid_columnconfigure(0, weight=1)

        ttk.Label(inputs, text="Context (Optional but Recommended)").grid(row=0, column=0, sticky="w", padx=10, pady=(8, 0))
        self._context_text = ScrolledText(inputs, height=4, wrap="word")
        self._context_text.grid(row=1, column=0, sticky="ew", padx=10, pady=(4, 6))
        self._context_text.bind("<KeyRelease>", lambda _e: self._on_inputs_changed())

        ttk.Label(inputs, text="Your Prompt").grid(row=2, column=0, sticky="w", padx=10)
        self._prompt_text = ScrolledText(inputs, height=5, wrap="word")
        self._prompt_text.grid(row=3, column=0, sticky="ew", padx=10, pady=(4, 10))
        self._prompt_text.bind("<KeyRelease>", lambda _e: self._on_inputs_changed())

        # Actions
        actions = ttk.Frame(self.master)
        actions.grid(row=3, column=0, sticky="ew", padx=10, pady=8)
        actions.grid_columnconfigure(3, weight=1)

        self._run_btn = ttk.Button(actions, text="Run Selected Patterns (0)", command=self._on_run_clicked)
        self._run_btn.grid(row=0, column=0, sticky="w")

        self._context_used_label = ttk.Label(actions, text="", foreground="#16a34a")
        self._context_used_label.grid(row=0, column=1, sticky="w", padx=(10, 0))

        ttk.Label(actions, text="LLM:").grid(row=0, column=2, sticky="e", padx=(20, 6))
        self._provider_combo = ttk.Combobox(actions, state="readonly", width=50)
        self._provider_combo.grid(row=0, column=3, sticky="w")
        self._provider_combo.bind("<<ComboboxSelected>>", lambda _e: self._on_provider_selected())

        self._export_btn = ttk.Button(actions, text="Export results", command=self._on_export_clicked)
        self._export_btn.grid(row=0, column=4, sticky="e", padx=(10, 0))

        self._exit_btn = ttk.Button(actions, text="Exit", command=self._on_close)
        self._exit_btn.grid(row=0, column=5, sticky="e", padx=(10, 0))

        self._status_var = tk.StringVar(value="Idle")
        ttk.Label(actions, textvariable=self._status_var).grid(row=1, column=0, columnspan=6, sticky="w", pady=(6, 0))

        # Pattern selection
        patterns = ttk.LabelFrame(self.master, text="Select Patterns to Compare")
        patterns.grid(row=4, column=0, sticky="ew", padx=10)
        selection = set(self.orchestrator.selection)
        for col, pattern in enumerate(self.registry):
            cell = tk.Frame(patterns, highlightbackground=pattern.color, highlightthickness=2, padx=6, pady=4)
            cell.grid(row=0, column=col, sticky="nsew", padx=6, pady=8)
            patterns.grid_columnconfigure(col, weight=1)

            var = tk.BooleanVar(value=pattern.pattern_id in selection)
            check = ttk.Checkbutton(
                cell,
                text=pattern.name,
                variable=var,
                command=lambda pid=pattern.pattern_id: self._on_pattern_toggled(pid),
            )
            check.grid(row=0, column=0, sticky="w")
            ttk.Label(cell, text=pattern.description, foreground="#555", wraplength=180).grid(
                row=1, column=0, sticky="w"
            )
            self._pattern_vars[pattern.pattern_id] = var
            self._pattern_checks[pattern.pattern_id] = check

        # Results
        self._results_frame = ttk.Frame(self.master)
        self._results_frame.grid(row=5, column=0, sticky="nsew", padx=10, pady=10)
        self._results_frame.grid_columnconfigure(0, weight=1)
        self._results_frame.grid_columnconfigure(1, weight=1)
        self.master.grid_rowconfigure(5, weight=1)

        # Concepts
        self._footer = ttk.LabelFrame(self.master, text="Key AI PM Concepts Demonstrated")
        self._footer.grid(row=6, column=0, sticky="ew", padx=10, pady=(0, 10))
        for col, (title, body) in enumerate(CONCEPTS):
            self._footer.grid_columnconfigure(col, weight=1)
            ttk.Label(self._footer, text=title, font=("TkDefaultFont", 10, "bold")).grid(
                row=0, column=col, sticky="w", padx=8, pady=(6, 0)
            )
            ttk.Label(self._footer, text=body, foreground="#555", wraplength=320).grid(
                row=1, column=col, sticky="nw", padx=8, pady=(2, 8)
            )


    def _rebuild_result_panels(self) -> None:
        for panel in self._panels.values():
            panel.frame.destroy()
        self._panels.clear()

        for index, pattern_id in enumerate(self.orchestrator.selection):
            pattern = self.registry.get(pattern_id)
            frame = tk.Frame(self._results_frame, highlightbackground=pattern.color, highlightthickness=2)
            frame.grid(row=index // 2, column=index % 2, sticky="nsew", padx=6, pady=6)
            frame.grid_columnconfigure(0, weight=1)
            self._results_frame.grid_rowconfigure(index // 2, weight=1)

            ttk.Label(frame, text=pattern.name, font=("TkDefaultFont", 11, "bold")).grid(
                row=0, column=0, sticky="w", padx=8, pady=(6, 0)
            )
            meta = ttk.Label(frame, text="", foreground="#16a34a")
            meta.grid(row=0, column=1, sticky="e", padx=8, pady=(6, 0))
            ttk.Label(frame, text=pattern.description, foreground="#555").grid(
                row=1, column=0, columnspan=2, sticky="w", padx=8
            )
            output = ScrolledText(frame, height=10, wrap="word", state="disabled")
            output.grid(row=2, column=0, columnspan=2, sticky="nsew", padx=8, pady=6)
            frame.grid_rowconfigure(2, weight=1)

            run_btn = ttk.Button(frame, text="Run", command=lambda pid=pattern_id: self._on_run_single(pid))
            run_btn.grid(row=3, column=1, sticky="e", padx=8, pady=(0, 6))

            self._panels[pattern_id] = _ResultPanel(frame=frame, meta_label=meta, output_text=output, run_btn=run_btn)
            self._refresh_panel(pattern_id)

    def _refresh_panel(self, pattern_id: str) -> None:
        panel = self._panels.get(pattern_id)
        if panel is None:
            return

        result = self.orchestrator.result_for(pattern_id)
        if self.orchestrator.is_in_flight(pattern_id):
            text = RUNNING
        elif result is not None:
            text = result.output
        else:
            text = PLACEHOLDER

        meta = ""
        if result is not None:
            meta = f"With Context  {result.time_label}" if result.used_context else result.time_label
        panel.meta_label.configure(text=meta)

        panel.output_text.configure(state="normal")
        panel.output_text.delete("1.0", "end")
        panel.output_text.insert("1.0", text)
        panel.output_text.configure(state="disabled")
        panel.run_btn.configure(state="disabled" if self._running else "normal")

    # ---------------- Data loading ----------------

    def _load_providers_into_dropdown(self) -> None:
        self._provider_display_to_id.clear()
        values: list[str] = []

        for provider in self.config.providers:
            model = provider.config.get("model_name")
            model_part = f" | model: {model}" if model else ""
            kind = "API" if provider.kind == ProviderKind.API else "local"
            label = f"{provider.display_name}  ({kind}){model_part}"
            self._provider_display_to_id[label] = provider.provider_id
            values.append(label)

        self._provider_combo["values"] = values

        if not values:
            self._provider_combo.set("")
            self._provider_combo.configure(state="disabled")
            self._selected_provider_id = None
            self._status_var.set("No LLM provider configured. Add one in config/playground.json.")
            return

        self._provider_combo.configure(state="readonly")
        self._provider_combo.current(0)
        self._on_provider_selected()

    def _on_provider_selected(self) -> None:
        provider_id = self._provider_display_to_id.get(self._provider_combo.get())
        if provider_id is None:
            return
        definition = self.config.get_provider(provider_id)
        try:
            self.orchestrator.provider = self._provider_factory(definition)
        except ValueError as e:
            self._selected_provider_id = None
            self._status_var.set(f"Cannot use provider '{provider_id}': {e}")
            self._sync_run_button_state()
            return
        self._selected_provider_id = provider_id
        logger.info("Provider selected: %s", provider_id)
        self._sync_run_button_state()

    # ---------------- UI events ----------------

    def _on_inputs_changed(self) -> None:
        if self._running:
            return
        context = self._context_text.get("1.0", "end-1c")
        self.orchestrator.set_inputs(self._prompt_text.get("1.0", "end-1c"), context)

        if context:
            self._context_tip.grid_remove()
            self._context_used_label.configure(text="✓ Using context in prompts")
        else:
            self._context_tip.grid()
            self._context_used_label.configure(text="")
        self._sync_run_button_state()

    def _on_pattern_toggled(self, pattern_id: str) -> None:
        selected = self.orchestrator.toggle_selection(pattern_id)
        self._pattern_vars[pattern_id].set(selected)
        self._rebuild_result_panels()
        self._sync_run_button_state()

    def _sync_run_button_state(self) -> None:
        """Enable/disable the Run button based on current prerequisites."""
        count = len(self.orchestrator.selection)
        self._run_btn.configure(text=f"Run Selected Patterns ({count})")
        if self._running or not self._selected_provider_id or not self.orchestrator.can_run():
            self._run_btn.configure(state="disabled")
            return
        self._run_btn.configure(state="normal")

    def _on_run_clicked(self) -> None:
        self._on_inputs_changed()
        if self._running or not self.orchestrator.can_run():
            return
        self._start_worker(self.orchestrator.run_selected, f"Running {len(self.orchestrator.selection)} pattern(s)...")

    def _on_run_single(self, pattern_id: str) -> None:
        self._on_inputs_changed()
        if self._running or not self._selected_provider_id or not self.orchestrator.prompt.strip():
            return
        self._start_worker(lambda: self.orchestrator.run_pattern(pattern_id), f"Running {pattern_id}...")

    def _start_worker(self, job: Callable[[], object], status: str) -> None:
        self._set_running_state(True)
        self._status_var.set(status)
        t = threading.Thread(target=self._run_thread, args=(job,), daemon=True)
        t.start()

    def _on_export_clicked(self) -> None:
        if not self.orchestrator.results:
            messagebox.showerror("Error", "Nothing to export yet: run at least one pattern.")
            return
        path = filedialog.askdirectory()
        if not path:
            return
        try:
            csv_file, raw_file = self._export_results(path)
        except OSError as e:
            messagebox.showerror("Export failed", str(e))
            return
        self._status_var.set(f"Results saved in: {csv_file} (raw: {raw_file})")

    def _on_close(self) -> None:
        if self._running:
            ok = messagebox.askyesno(
                "Exit",
                "Patterns are still running; their results will be lost.\nExit anyway?",
            )
            if not ok:
                return
        self.master.destroy()

    # ---------------- Background run ----------------

    def _on_orchestrator_change(self, pattern_id: str) -> None:
        # called from the worker thread
        self.master.after(0, lambda: self._refresh_panel(pattern_id))

    def _run_thread(self, job: Callable[[], object]) -> None:
        try:
            job()
            self.master.after(0, self._ui_done)
        except Exception as e:
            logger.exception("Run failed")
            err_text = f"{type(e).__name__}: {e}"
            self.master.after(0, lambda err=err_text: self._ui_done(error=err))

    def _ui_done(self, error: Optional[str] = None) -> None:
        self._set_running_state(False)
        if error:
            self._status_var.set(f"Error during run: {error}")
        else:
            self._status_var.set(f"Idle (last run: {datetime.now().strftime('%H:%M:%S')})")
        for pattern_id in self._panels:
            self._refresh_panel(pattern_id)

    def _set_running_state(self, running: bool) -> None:
        self._running = running
        state = "disabled" if running else "normal"

        for check in self._pattern_checks.values():
            check.configure(state=state)
        for panel in self._panels.values():
            panel.run_btn.configure(state=state)
        self._export_btn.configure(state=state)
        self._prompt_text.configure(state=state)
        self._context_text.configure(state=state)
        if self._provider_display_to_id:
            self._provider_combo.configure(state="disabled" if running else "readonly")
        self._sync_run_button_state()

    # ---------------- Export ----------------

    def _export_results(self, output_path: str) -> tuple[str, str]:
        df = self.orchestrator.results_to_dataframe()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_dir = os.path.join(output_path, "output")
        os.makedirs(output_dir, exist_ok=True)

        csv_file = os.path.join(output_dir, f"pattern_comparison_{timestamp}.csv")
        df.to_csv(csv_file, index=False)

        results = self.orchestrator.results
        raw_file = os.path.join(output_dir, f"pattern_comparison_{timestamp}_raw.jsonl")
        with open(raw_file, "w", encoding="utf-8") as f:
            for pattern_id in df["pattern_id"]:
                rec = results[pattern_id].to_export_row(pattern_id, self.registry.get(pattern_id).name)
                rec["provider_id"] = self._selected_provider_id
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")

        logger.info("Exported %d result(s) to %s", len(df.index), output_dir)
        return csv_file, raw_file


def main() -> None:
    get_logger()
    root = tk.Tk()
    PatternPlaygroundGUI(root)
    root.mainloop()


if __name__ == "__main__":
    main()
