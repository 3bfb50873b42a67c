"""Colour and styling helpers built on :mod:`rich`."""

import os

from rich.console import Console
from rich.markup import escape


console = Console()


class Ansi:
    """Lightweight collection of style names used throughout the app."""

    BOLD = "bold"
    DIM = "dim"

    FG_GREEN = "green"
    FG_CYAN = "cyan"
    FG_MAGENTA = "magenta"
    FG_YELLOW = "yellow"
    FG_RED = "red"
    FG_GRAY = "bright_black"

    @staticmethod
    def style(text: str, *codes: str) -> str:
        """Return *text* wrapped in rich markup unless ``NO_COLOR`` is set."""
        if os.getenv("NO_COLOR") is not None:
            return text
        style = " ".join(codes)
        return f"[{style}]{text}[/]"


def print_gray(out: Console, text: str) -> None:
    """Print a dimmed status notice (attachments, autosave, ...)."""
    out.print(Ansi.style(escape(text), Ansi.FG_GRAY))


def print_gray_error(out: Console, text: str) -> None:
    out.print(Ansi.style(escape(text), Ansi.FG_RED, Ansi.DIM))


# Common labels used throughout the application
USER_LABEL = Ansi.style("you", Ansi.FG_CYAN, Ansi.BOLD)
ASSISTANT_LABEL = Ansi.style("assistant", Ansi.FG_GREEN, Ansi.BOLD)
ERROR_LABEL = Ansi.style("error", Ansi.FG_RED, Ansi.BOLD)
WARNING_LABEL = Ansi.style("warning", Ansi.FG_YELLOW, Ansi.BOLD)
