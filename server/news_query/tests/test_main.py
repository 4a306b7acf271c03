"""
Tests for news_query.main

Runs the command line entry point against forest files in tmp_path.
"""
import io
import json
import xml.etree.ElementTree as ET

import pytest

from news_query import main as cli

FOREST = [
    {"id": "A", "label": "Apple Inc", "category": "Organisation"},
    {"category": "Operator", "operatorKind": "AND"},
    {
        "id": "P1",
        "label": "Tech portfolio",
        "category": "Portfolio",
        "children": [
            {"id": "MSFT.O", "label": "Microsoft ric", "category": "Instrument"},
            {"id": "G", "label": "Alphabet Inc", "category": "Organisation"},
        ],
    },
]


@pytest.fixture
def forest_file(tmp_path):
    path = tmp_path / "forest.json"
    path.write_text(json.dumps(FOREST), encoding="utf-8")
    return path


def test_prints_filter_fragment(forest_file, capsys):
    assert cli.main([str(forest_file), "--repository", "NewsWire", "--search-in", "FullText"]) == 0

    result = json.loads(capsys.readouterr().out)
    root = ET.fromstring(result["filter"])

    assert result["destination"] == "NEWSWIRE"
    assert root.get("searchIn") == "FullText"
    assert root.find("Operator").get("kind") == "AND"


def test_extracts_entities(forest_file, capsys):
    assert cli.main([str(forest_file), "--extract", "Organisation"]) == 0

    result = json.loads(capsys.readouterr().out)

    assert result["category"] == "Organisation"
    assert [e["label"] for e in result["entities"]] == ["Alphabet Inc", "Apple Inc"]


def test_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(FOREST[:1])))

    assert cli.main(["-"]) == 0
    assert "Apple Inc" in json.loads(capsys.readouterr().out)["filter"]


def test_malformed_forest_exits_with_error(tmp_path, caplog):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(FOREST[:2]), encoding="utf-8")

    assert cli.main([str(path)]) == 1
    assert "Query compilation failed" in caplog.text


def test_missing_file_exits_with_error(tmp_path):
    assert cli.main([str(tmp_path / "missing.json")]) == 1
