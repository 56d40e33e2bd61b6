"""
Paste input helpers: reading content, loading attachments, guessing a formatter.
"""

from __future__ import annotations

import mimetypes
import sys
from pathlib import Path
from typing import TextIO

from zkpaste.codec import Attachment
from zkpaste.errors import InvalidOptions

_MARKDOWN_SUFFIXES = frozenset({".md", ".markdown", ".mdown", ".mkd", ".mkdn"})

_SOURCE_SUFFIXES = frozenset({
    ".c", ".h", ".cc", ".cpp", ".hpp", ".cs", ".go", ".rs", ".java", ".kt",
    ".scala", ".swift", ".py", ".pyi", ".rb", ".pl", ".php", ".lua", ".js",
    ".mjs", ".ts", ".tsx", ".jsx", ".sh", ".bash", ".zsh", ".fish", ".ps1",
    ".sql", ".html", ".htm", ".css", ".scss", ".xml", ".json", ".yaml",
    ".yml", ".toml", ".ini", ".diff", ".patch", ".hs", ".ml", ".ex", ".exs",
    ".erl", ".clj", ".lisp", ".el", ".vim", ".r", ".jl", ".dart", ".zig",
    ".nix", ".tf", ".proto", ".dockerfile", ".mk",
})

_SOURCE_FILENAMES = frozenset({"Makefile", "Dockerfile", "Justfile", "justfile", "CMakeLists.txt"})


def read_input(path: str | None = None, stdin: TextIO | None = None) -> str | None:
    """Read paste text from a file, or from piped stdin.

    Returns None when no file is given and stdin is an interactive terminal.
    """
    if path:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidOptions(f"Could not open file {path}: {e}", field="file") from e

    stream = stdin if stdin is not None else sys.stdin
    if stream is None or stream.isatty():
        return None
    try:
        return stream.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidOptions(f"Could not read stdin: {e}", field="file") from e


def load_attachment(path: str) -> Attachment:
    """Read a file to attach, guessing its MIME type from the name."""
    p = Path(path)
    if not p.is_file():
        raise InvalidOptions(f"Could not open file {path}: not a file", field="attachment")
    try:
        data = p.read_bytes()
    except OSError as e:
        raise InvalidOptions(f"Could not open file {path}: {e}", field="attachment") from e

    mime, _ = mimetypes.guess_type(p.name)
    return Attachment(name=p.name, data=data, mime=mime or "application/octet-stream")


def guess_formatter(content: str | None, filename: str | None = None) -> str:
    """Pick "markdown", "syntaxhighlighting" or "plaintext" for a paste."""
    if filename:
        p = Path(filename)
        suffix = p.suffix.lower()
        if suffix in _MARKDOWN_SUFFIXES:
            return "markdown"
        if suffix in _SOURCE_SUFFIXES or p.name in _SOURCE_FILENAMES:
            return "syntaxhighlighting"

    if content and content.startswith("#!"):
        return "syntaxhighlighting"
    return "plaintext"
