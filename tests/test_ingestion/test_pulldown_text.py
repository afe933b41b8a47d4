from pathlib import Path

from protoview.ingestion.pulldown_text import PulldownSummary
from protoview.models import SchemaVersion, ToolGeneration

FIXTURE = Path(__file__).parent.parent / "fixtures" / "high_confidence_af2_predictions_v2_summary_ALL.txt"


def test_parse_summary_counts():
    summary = PulldownSummary(FIXTURE)
    records = list(summary)
    assert len(records) == 3
    assert summary.stats.parsed == 3
    assert summary.stats.skipped_malformed == 2


def test_columns_shift_after_marker():
    records = list(PulldownSummary(FIXTURE))
    rec = records[0]
    assert rec.bait_accession == "AF2_Cr54N"
    assert rec.prey_accession == "AF2_Cre01.g032150.t1.1"
    assert rec.primary_score == 0.81
    assert rec.contacts == 42
    assert rec.contacts_loose == 55
    assert rec.interface_confidence is None
    assert rec.reported_band == "Very High"
    assert rec.tool_generation == ToolGeneration.LEGACY
    assert rec.schema_version == SchemaVersion.PULLDOWN
    assert rec.synthetic is True


def test_underscore_split_without_and():
    records = list(PulldownSummary(FIXTURE))
    pairs = {(r.bait_accession, r.prey_accession) for r in records}
    assert ("AF2_81CH", "AF2_abTub") in pairs
    assert ("AF2_ODA16", "AF2_DAW1") in pairs


def test_band_summary_lines_ignored():
    parser = PulldownSummary(FIXTURE)
    assert parser.parse_line("High: 12") is None
    assert parser.parse_line("Directory Type iPTM C3 C5 C8 C12 Confidence") is None
