from .ansi import (
    Ansi,
    USER_LABEL,
    ASSISTANT_LABEL,
    ERROR_LABEL,
    WARNING_LABEL,
    console,
    print_gray,
    print_gray_error,
)
from .files import CodeBlock, iter_files, parse_file_content
from .spinner import Spinner

__all__ = [
    "Ansi",
    "USER_LABEL",
    "ASSISTANT_LABEL",
    "ERROR_LABEL",
    "WARNING_LABEL",
    "console",
    "print_gray",
    "print_gray_error",
    "CodeBlock",
    "iter_files",
    "parse_file_content",
    "Spinner",
]
