import shutil
from pathlib import Path

import pytest

from protoview.exceptions import ParseError
from protoview.ingestion.af3_json import AF3ComplexFile, AF3PredictionFile
from protoview.ingestion.discovery import detect_format, find_result_files, open_parser
from protoview.ingestion.legacy_text import LegacyTextReport
from protoview.ingestion.pulldown_text import PulldownSummary

FIXTURES = Path(__file__).parent.parent / "fixtures"


@pytest.fixture()
def tree(tmp_path):
    (tmp_path / "IFT121" / "AF3").mkdir(parents=True)
    (tmp_path / "IFT52" / "AF3").mkdir(parents=True)
    shutil.copy(FIXTURES / "AF3_PD_analysis_v4.json", tmp_path / "IFT121" / "AF3")
    shutil.copy(FIXTURES / "AF3_PD_analysis_v3.json", tmp_path / "IFT52" / "AF3")
    (tmp_path / "IFT52" / "AF3" / "notes.json").write_text("{}")
    return tmp_path


def test_find_result_files_recursive(tree):
    files = find_result_files([tree])
    assert [f.name for f in files] == ["AF3_PD_analysis_v4.json", "AF3_PD_analysis_v3.json"]


def test_find_result_files_custom_basenames(tree):
    files = find_result_files([tree], basenames=["AF3_PD_analysis_v4.json"])
    assert len(files) == 1


def test_missing_base_path_skipped(tree, caplog):
    files = find_result_files([tree / "nope", tree])
    assert len(files) == 2
    assert "does not exist" in caplog.text


def test_explicit_file_and_duplicates(tree):
    target = tree / "IFT121" / "AF3" / "AF3_PD_analysis_v4.json"
    files = find_result_files([target, tree])
    assert len(files) == 2


def test_detect_format_by_basename():
    assert detect_format(FIXTURES / "ALL_RESULTS_FINAL_ANNOTATED.txt") == "text"
    assert detect_format(FIXTURES / "high_confidence_af2_predictions_v2_summary_ALL.txt") == "pulldown"
    assert detect_format(FIXTURES / "AF3_PD_analysis_v3.json") == "json"
    assert detect_format(FIXTURES / "complex" / "AF3_bait_prey_analysis_v4.json") == "complex"


def test_detect_format_by_content(tmp_path):
    renamed = tmp_path / "predictions.json"
    shutil.copy(FIXTURES / "complex" / "AF3_bait_prey_analysis_v4.json", renamed)
    assert detect_format(renamed) == "complex"

    summary = tmp_path / "summary.txt"
    shutil.copy(FIXTURES / "high_confidence_af2_predictions_v2_summary_ALL.txt", summary)
    assert detect_format(summary) == "pulldown"

    with pytest.raises(ParseError):
        detect_format(tmp_path / "data.csv")


def test_open_parser_types():
    assert isinstance(open_parser(FIXTURES / "ALL_RESULTS_FINAL_ANNOTATED.txt"), LegacyTextReport)
    assert isinstance(
        open_parser(FIXTURES / "high_confidence_af2_predictions_v2_summary_ALL.txt"), PulldownSummary
    )
    assert isinstance(open_parser(FIXTURES / "AF3_PD_analysis_v4.json"), AF3PredictionFile)
    parser = open_parser(FIXTURES / "complex" / "AF3_bait_prey_analysis_v4.json", variant="Nterm")
    assert isinstance(parser, AF3ComplexFile)
    assert parser.variant == "Nterm"
