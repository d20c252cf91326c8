import tkinter as tk

import pytest

from llm_patterns.config_store import PlaygroundConfigStore, default_config


class ImmediateThread:
    """Stand-in for threading.Thread: runs target() right away inside the test."""

    def __init__(self, target=None, args=(), kwargs=None, daemon=None):
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.daemon = daemon

    def start(self):
        if self._target:
            self._target(*self._args, **self._kwargs)


@pytest.fixture(scope="session")
def tk_app():
    """Single Tcl/Tk interpreter for the whole session; one Toplevel per test."""
    try:
        app = tk.Tk()
    except tk.TclError as e:
        pytest.skip(f"Tkinter/Tcl not available (cannot create tk.Tk()): {e}")

    app.withdraw()
    yield app
    app.quit()
    app.update()
    app.destroy()


@pytest.fixture
def tk_root(tk_app):
    win = tk.Toplevel(tk_app)
    win.withdraw()
    yield win
    try:
        win.destroy()
    except tk.TclError:
        pass


@pytest.fixture
def force_sync_threads(monkeypatch):
    import threading

    monkeypatch.setattr(threading, "Thread", ImmediateThread)
    return ImmediateThread


@pytest.fixture
def config_store(tmp_path):
    store = PlaygroundConfigStore(file_path=str(tmp_path / "playground.json"))
    store.save(default_config())
    return store
