"""Parser for the annotated AF3 results report (ALL_RESULTS_FINAL_ANNOTATED.txt).

The report is a sequence of per-run sections::

    --- Results from: /data/AF3_APD/IFT121 ---
    VERY HIGH CONFIDENCE (iPTM >= 0.7)
    ift121_and_ptch1 0.47 30 30 62.0 [Q9P2L0:IFT121 & Q13635:PTCH1]

Each data line inherits the most recent section path and confidence
banner. Scanning is a left fold over lines with an explicit state value,
so every record captures the state at the moment it is emitted.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, replace

from protoview.ingestion.base import SourceParser
from protoview.ingestion.records import PredictionRecord
from protoview.models import REPORT_BANNERS, ConfidenceLevel, SchemaVersion, ToolGeneration

HEADER_RE = re.compile(r"^--- Results from: (.*) ---$")
BRACKET_RE = re.compile(r"\[([^\]]*)\]")
PAIR_SPLIT_RE = re.compile(r"\s*&\s*")


@dataclass(frozen=True)
class ScanState:
    source_path: str
    band: str = ConfidenceLevel.UNKNOWN.value


class LegacyTextReport(SourceParser):
    format_name = "text"

    def _records(self, text: str) -> Iterator[PredictionRecord]:
        state = ScanState(source_path=str(self.path))
        for line in text.splitlines():
            state, record = self.step(state, line)
            if record is not None:
                yield record

    def step(self, state: ScanState, line: str) -> tuple[ScanState, PredictionRecord | None]:
        """Advance the fold by one line."""
        header = HEADER_RE.match(line)
        if header:
            return replace(state, source_path=header.group(1).strip()), None

        for banner, band in REPORT_BANNERS.items():
            if line.startswith(banner):
                return replace(state, band=band.value), None

        parts = line.split()
        if len(parts) < 5 or "_and_" not in parts[0]:
            return state, None

        try:
            iptm = float(parts[1])
            strict = int(parts[2])
            loose = int(parts[3])
            iplddt = float(parts[4])
        except ValueError:
            self.stats.skipped_malformed += 1
            return state, None

        members = _bracket_members(line)
        if members is None:
            self.stats.skipped_unresolved += 1
            return state, None
        (bait, bait_name), (prey, prey_name) = members

        self.stats.parsed += 1
        return state, PredictionRecord(
            bait_accession=bait,
            prey_accession=prey,
            bait_name=bait_name,
            prey_name=prey_name,
            primary_score=iptm,
            contacts=strict,
            contacts_loose=loose,
            interface_confidence=iplddt,
            tool_generation=ToolGeneration.CURRENT,
            schema_version=SchemaVersion.TEXT,
            source_origin=state.source_path,
            directory=parts[0],
            reported_band=state.band,
        )


def _bracket_members(line: str) -> tuple[tuple[str, str | None], tuple[str, str | None]] | None:
    """``[Q9P2L0:IFT121 & Q13635:PTCH1]`` -> ((acc, gene), (acc, gene))."""
    match = BRACKET_RE.search(line)
    if not match:
        return None
    halves = PAIR_SPLIT_RE.split(match.group(1).strip())
    if len(halves) != 2:
        return None
    members = []
    for half in halves:
        fields = half.split(":")
        if len(fields) != 2 or not fields[0].strip():
            return None
        members.append((fields[0].strip().upper(), fields[1].strip() or None))
    return members[0], members[1]
