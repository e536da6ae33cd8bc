import json
from pathlib import Path

import pytest

from scripts.run_rule_analysis import main


DATA_DIR = Path(__file__).resolve().parents[4] / "data"


@pytest.fixture(autouse=True)
def _sample_data(monkeypatch):
    monkeypatch.setenv("RULE_ANALYSIS_DATA_DIR", str(DATA_DIR))
    monkeypatch.setenv("RULE_ANALYSIS_DATA_SOURCE", "fixtures")
    monkeypatch.delenv("RULE_ANALYSIS_VOCAB_CANONICAL", raising=False)
    monkeypatch.delenv("RULE_ANALYSIS_VOCAB_TARGET", raising=False)


def test_progress_json(capsys):
    main(["--format", "json", "progress", "pa-1001"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["complete"] is False
    assert [b["rule_book_id"] for b in payload["rule_books"]] == ["rb-arbst-v1", "rb-bauo-v2"]
    bauo = payload["rule_books"][1]
    assert [s["key"] for s in bauo["segments"]] == ["1", "14"]
    assert bauo["total_parameters"] == 4


def test_next_json(capsys):
    main(["--format", "json", "next", "pa-1001", "rb-bauo-v2", "14"])
    assert json.loads(capsys.readouterr().out) == {"next": None, "finished": True}


def test_segments_yaml(capsys):
    main(["segments", "pa-1001"])
    out = capsys.readouterr().out
    assert "rule_book_id: rb-arbst-v1" in out
    assert "segment_key: '14'" in out


def test_unknown_analysis_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--format", "json", "report", "missing"])
    assert "not found" in str(exc.value)


def test_unknown_data_source_exits(monkeypatch):
    monkeypatch.setenv("RULE_ANALYSIS_DATA_SOURCE", "postgres")
    with pytest.raises(SystemExit) as exc:
        main(["progress", "pa-1001"])
    assert "postgres" in str(exc.value)
