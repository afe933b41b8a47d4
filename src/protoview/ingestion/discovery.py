"""Batch discovery -- find result files under base paths and pick their parser."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from protoview.config import config
from protoview.exceptions import ParseError
from protoview.ingestion.af3_json import AF3ComplexFile, AF3PredictionFile
from protoview.ingestion.base import SourceParser
from protoview.ingestion.legacy_text import LegacyTextReport
from protoview.ingestion.pulldown_text import MARKER, PulldownSummary

logger = logging.getLogger(__name__)

PARSERS: dict[str, type[SourceParser]] = {
    "text": LegacyTextReport,
    "pulldown": PulldownSummary,
    "json": AF3PredictionFile,
    "complex": AF3ComplexFile,
}


def find_result_files(
    base_paths: Iterable[Path | str], basenames: Iterable[str] | None = None
) -> list[Path]:
    """Recursively collect files whose basename is in *basenames*.

    A base path that is itself a file is taken as-is. Missing base paths
    are logged and skipped.
    """
    wanted = set(basenames or config.ingest.basenames)
    found: list[Path] = []
    for base in base_paths:
        base = Path(base)
        if not base.exists():
            logger.warning("Base path does not exist: %s", base)
            continue
        if base.is_file():
            found.append(base)
            continue
        matches = sorted(p for p in base.rglob("*") if p.name in wanted and p.is_file())
        logger.info("Found %d result files under %s", len(matches), base)
        found.extend(matches)

    seen: set[Path] = set()
    unique = []
    for path in found:
        resolved = path.resolve()
        if resolved not in seen:
            seen.add(resolved)
            unique.append(path)
    return unique


def detect_format(path: Path | str) -> str:
    """Format name for *path*: by basename first, then by a look at the content."""
    path = Path(path)
    name = path.name
    if name.startswith("AF3_bait_prey_analysis"):
        return "complex"
    if name.startswith("AF3_PD_analysis"):
        return "json"
    if name.startswith("high_confidence_af2_predictions"):
        return "pulldown"
    if name.startswith("ALL_RESULTS"):
        return "text"

    if not path.is_file():
        raise ParseError(f"File not found: {path}")
    if path.suffix.lower() == ".json":
        return _sniff_json(path)
    if path.suffix.lower() == ".txt":
        return _sniff_text(path)
    raise ParseError(f"Unrecognised result file: {path}")


def _sniff_json(path: Path) -> str:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise ParseError(f"Unrecognised result file: {path}")
    predictions = (
        document.get("high_confidence_predictions")
        or document.get("filtered_predictions")
        or []
    )
    for entry in predictions[:20]:
        if not isinstance(entry, dict):
            continue
        token = entry.get("directory_name") or entry.get("directory") or ""
        if "_with_" in token or entry.get("bait_chains"):
            return "complex"
    return "json"


def _sniff_text(path: Path) -> str:
    try:
        with path.open(encoding="utf-8") as fh:
            for line in fh:
                parts = line.split()
                if len(parts) >= 8 and parts[1] == MARKER:
                    return "pulldown"
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Cannot read {path}: {exc}") from exc
    return "text"


def open_parser(path: Path | str, variant: str | None = None) -> SourceParser:
    fmt = detect_format(path)
    if fmt == "complex":
        return AF3ComplexFile(path, variant=variant)
    return PARSERS[fmt](path)
