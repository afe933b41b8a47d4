"""Parser for the AF2 pulldown summary (high_confidence_af2_predictions_v2_summary_ALL.txt).

Data lines carry a ``Pulldown`` marker in the second column::

    Cr54N_and_Cre01.g032150.t1.1  Pulldown  0.81  42  55  70  88  Very High

Columns after the marker are iptm, contacts at 3/5/8/12 A and the band.
Band vocabularies are two words wide for ``Very High``, so the band is
whatever remains after the numeric columns. Directory tokens carry no
accessions; identities are synthesized in the ``AF2_`` namespace.
"""

from __future__ import annotations

from collections.abc import Iterator

from protoview.ingestion.base import SourceParser
from protoview.ingestion.records import PredictionRecord
from protoview.models import PULLDOWN_BANDS, SchemaVersion, ToolGeneration
from protoview.services.identifiers import PSEUDO_PREFIX, synthesize_pseudo_accessions

MARKER = "Pulldown"


class PulldownSummary(SourceParser):
    format_name = "pulldown"

    def _records(self, text: str) -> Iterator[PredictionRecord]:
        for line in text.splitlines():
            record = self.parse_line(line)
            if record is not None:
                yield record

    def parse_line(self, line: str) -> PredictionRecord | None:
        parts = line.split()
        if len(parts) < 8 or parts[1] != MARKER:
            return None

        band = " ".join(parts[7:])
        try:
            iptm = float(parts[2])
            contacts_3 = int(parts[3])
            contacts_5 = int(parts[4])
        except ValueError:
            self.stats.skipped_malformed += 1
            return None
        if band not in PULLDOWN_BANDS:
            self.stats.skipped_malformed += 1
            return None

        pair = synthesize_pseudo_accessions(parts[0])
        if pair is None:
            self.stats.skipped_unresolved += 1
            return None
        bait, prey = pair

        self.stats.parsed += 1
        return PredictionRecord(
            bait_accession=bait,
            prey_accession=prey,
            bait_name=bait.removeprefix(PSEUDO_PREFIX),
            prey_name=prey.removeprefix(PSEUDO_PREFIX),
            synthetic=True,
            primary_score=iptm,
            contacts=contacts_3,
            contacts_loose=contacts_5,
            interface_confidence=None,
            tool_generation=ToolGeneration.LEGACY,
            schema_version=SchemaVersion.PULLDOWN,
            source_origin=str(self.path),
            directory=parts[0],
            reported_band=band,
        )
