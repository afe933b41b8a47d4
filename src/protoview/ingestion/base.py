"""Shared plumbing for the result-file parsers."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from protoview.exceptions import ParseError
from protoview.ingestion.records import ParseStats


class SourceParser:
    """Wraps one source file; each iteration re-reads it from disk.

    Per-iteration counters are available on ``stats`` once iteration ends.
    """

    format_name = "unknown"

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.stats = ParseStats()

    def __iter__(self) -> Iterator:
        self.stats = ParseStats()
        return self._records(self._read_text())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path}>"

    def _read_text(self) -> str:
        if not self.path.is_file():
            raise ParseError(f"File not found: {self.path}")
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"Cannot read {self.path}: {exc}") from exc

    def _records(self, text: str) -> Iterator:
        raise NotImplementedError
