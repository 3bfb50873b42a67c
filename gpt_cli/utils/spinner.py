"""Spinner shown next to the assistant label while a backend is thinking."""
from __future__ import annotations

from rich.console import Console
from yaspin import yaspin

from .ansi import console as default_console


class Spinner:
    """Display a small spinner next to a prefix until the first token arrives."""

    def __init__(self, prefix: str = "", out: Console | None = None):
        self._prefix = prefix
        self._console = out or default_console
        self._started = False
        # spinner after the text so prefix stays at the start
        self._spinner = yaspin(text="", side="right")

    def start(self) -> None:
        if self._started:
            return
        self._console.print(self._prefix, end="")
        self._console.file.flush()
        if self._console.is_terminal:
            self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        if self._console.is_terminal:
            self._spinner.stop()
            self._console.print(f"\r{self._prefix}", end="")
            self._console.file.flush()
        self._started = False

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
