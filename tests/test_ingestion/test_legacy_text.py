from pathlib import Path

import pytest

from protoview.exceptions import ParseError
from protoview.ingestion.legacy_text import LegacyTextReport, ScanState
from protoview.models import SchemaVersion, ToolGeneration

FIXTURE = Path(__file__).parent.parent / "fixtures" / "ALL_RESULTS_FINAL_ANNOTATED.txt"


def test_parse_report_counts():
    report = LegacyTextReport(FIXTURE)
    records = list(report)
    assert len(records) == 3
    assert report.stats.parsed == 3
    assert report.stats.skipped_malformed == 1
    assert report.stats.skipped_unresolved == 1


def test_single_banner_line_fields(tmp_path):
    path = tmp_path / "ALL_RESULTS_FINAL_ANNOTATED.txt"
    path.write_text(
        "--- Results from: /data/AF3_APD/IFT121 ---\n"
        "VERY HIGH CONFIDENCE\n"
        "ift121_and_ptch1 0.47 30 30 62.0 [Q9P2L0:IFT121 & Q13635:PTCH1]\n"
    )
    records = list(LegacyTextReport(path))
    assert len(records) == 1
    rec = records[0]
    assert rec.bait_accession == "Q9P2L0"
    assert rec.prey_accession == "Q13635"
    assert rec.primary_score == 0.47
    assert rec.contacts == 30
    assert rec.contacts_loose == 30
    assert rec.interface_confidence == 62.0
    assert rec.reported_band == "Very High Confidence"
    assert rec.bait_name == "IFT121"
    assert rec.prey_name == "PTCH1"
    assert rec.tool_generation == ToolGeneration.CURRENT
    assert rec.schema_version == SchemaVersion.TEXT
    assert rec.source_origin == "/data/AF3_APD/IFT121"


def test_records_capture_state_at_emission():
    records = list(LegacyTextReport(FIXTURE))
    by_prey = {r.prey_accession: r for r in records}
    assert by_prey["Q96FT9"].reported_band == "Very High Confidence"
    assert by_prey["Q96FT9"].source_origin == "/data/AF3_APD/IFT121"
    assert by_prey["Q9NQC8"].reported_band == "Low iPTM - Proceed with Caution"
    assert by_prey["Q9NQC8"].source_origin == "/data/AF3_APD/IFT52"


def test_defaults_before_header_and_banner(tmp_path):
    path = tmp_path / "report.txt"
    path.write_text("ift52_and_ift46 0.31 8 12 55.0 [Q9Y366:IFT52 & Q9NQC8:IFT46]\n")
    rec = next(iter(LegacyTextReport(path)))
    assert rec.source_origin == str(path)
    assert rec.reported_band == "Unknown"


def test_iteration_is_restartable():
    report = LegacyTextReport(FIXTURE)
    first = list(report)
    second = list(report)
    assert first == second
    assert report.stats.parsed == 3


def test_step_is_a_pure_fold():
    report = LegacyTextReport(FIXTURE)
    state = ScanState(source_path="start")
    state, rec = report.step(state, "--- Results from: /x/y ---")
    assert rec is None
    assert state.source_path == "/x/y"
    state, rec = report.step(state, "WORTH INVESTIGATING")
    assert state.band == "Worth Investigating"
    state, rec = report.step(state, "a_and_b 0.6 10 12 70 [P12345:A & Q13635:B]")
    assert rec.source_origin == "/x/y"
    assert rec.reported_band == "Worth Investigating"


def test_missing_file_raises(tmp_path):
    with pytest.raises(ParseError, match="File not found"):
        list(LegacyTextReport(tmp_path / "missing.txt"))
