"""Attachment helpers: expand file patterns and render files as code blocks."""

import glob
import os
from pathlib import Path
from typing import Iterable, Iterator

IGNORED_DIRS = {
    ".git",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
}

LANGUAGES = {
    ".py": "python",
    ".ts": "typescript",
    ".js": "javascript",
    ".json": "json",
    ".md": "markdown",
    ".sh": "bash",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".html": "html",
    ".css": "css",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".sql": "sql",
}


def _is_glob(pattern: str) -> bool:
    return any(ch in pattern for ch in "*?[")


def _walk(directory: Path) -> Iterator[Path]:
    # Ignored directories are pruned before descending; order is sorted per level
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if d not in IGNORED_DIRS)
        for name in sorted(files):
            path = Path(root) / name
            if path.is_file():
                yield path


def iter_files(patterns: Iterable[str]) -> Iterator[Path]:
    """Yield every regular file matched by *patterns*.

    A pattern may be a plain file, a directory (walked recursively) or a glob
    (``**`` matches across directories). Patterns that match nothing yield
    nothing. Calling again restarts the enumeration.
    """
    for pattern in patterns:
        expanded = str(Path(pattern).expanduser())
        if _is_glob(expanded):
            for match in sorted(glob.iglob(expanded, recursive=True)):
                path = Path(match)
                if path.is_file():
                    yield path
            continue

        path = Path(expanded)
        if path.is_dir():
            yield from _walk(path)
        elif path.is_file():
            yield path


class CodeBlock:
    """A file's text ready to be pasted into the conversation."""

    def __init__(self, path: Path, content: str, language: str = ""):
        self.path = path
        self.content = content
        self.language = language

    def __str__(self) -> str:
        return f"```{self.language}\n# {self.path}\n{self.content.rstrip()}\n```"


def parse_file_content(path: Path) -> CodeBlock:
    """Read *path* as UTF-8 text.

    Raises ``OSError`` or ``UnicodeDecodeError`` for unreadable or binary files.
    """
    content = Path(path).read_text(encoding="utf-8")
    return CodeBlock(Path(path), content, LANGUAGES.get(Path(path).suffix.lower(), ""))
