#!/usr/bin/env python3
"""
Tests for the evaluation harness and its metrics.
"""

from __future__ import annotations

import json

import pytest
from openpyxl import Workbook, load_workbook

from aniparse import FilenameParser
from aniparse.evaluation import (
    FIELD_NAMES,
    ParsedRow,
    ReferenceCase,
    calculate_blind_metrics,
    calculate_reference_metrics,
    create_diff_rows,
    is_discrepancy_value,
    join_values,
    load_reference_cases,
    parse_filename,
    read_input_file,
    write_excel_output,
    write_json_metrics,
)
from tools.evaluate import main as evaluate_main
from tools.validate_dictionaries import main as validate_main


@pytest.fixture(scope="module")
def parser():
    return FilenameParser()


@pytest.fixture
def reference_file(tmp_path):
    path = tmp_path / "reference.json"
    path.write_text(json.dumps([
        {
            "id": 1,
            "file_name": "[Group] Title - 01-02.mkv",
            "results": {
                "anime_title": "Title",
                "episode_number": ["01", "02"],
                "release_group": "Group",
                "file_extension": "mkv",
            },
        },
        {
            "id": 2,
            "file_name": "Other - 05",
            "results": {"anime_title": "Wrong", "episode_number": "05"},
        },
        {"id": 3, "file_name": "Skipped - 01", "ignore": True, "results": {}},
    ]), encoding="utf-8")
    return path


def test_join_values():
    assert join_values(None) is None
    assert join_values([]) is None
    assert join_values("01") == "01"
    assert join_values(["01", "02"]) == "01 | 02"


def test_parse_filename_flattens_fields(parser):
    row = parse_filename(parser, "[Group] Title - 01-02.mkv")
    assert row.get("anime_title") == "Title"
    assert row.get("episode_number") == "01 | 02"
    assert row.get("release_group") == "Group"
    assert row.title_found
    assert row.token_count > 0
    assert len(row.to_excel_row()) == len(ParsedRow.get_headers())


def test_unlabeled_tokens(parser):
    row = parse_filename(parser, "[Group]")
    assert row.unlabeled_tokens == []
    assert not row.title_found


def test_load_reference_cases_skips_ignored(reference_file):
    cases = load_reference_cases(reference_file)
    assert [c.case_id for c in cases] == [1, 2]
    assert cases[0].expected["episode_number"] == "01 | 02"
    assert cases[0].expected["anime_year"] is None


def test_load_reference_cases_rejects_bad_structure(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"file_name": "x"}), encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a JSON list"):
        load_reference_cases(path)

    path.write_text(json.dumps([{"id": 1}]), encoding="utf-8")
    with pytest.raises(ValueError, match="has no file_name"):
        load_reference_cases(path)


class TestReadInputFile:
    def test_text(self, tmp_path):
        path = tmp_path / "names.txt"
        path.write_text("a.mkv\n\nb.mkv\nc.mkv\n", encoding="utf-8")
        assert read_input_file(path) == ["a.mkv", "b.mkv", "c.mkv"]
        assert read_input_file(path, limit=2) == ["a.mkv", "b.mkv"]

    def test_excel(self, tmp_path):
        path = tmp_path / "names.xlsx"
        wb = Workbook()
        ws = wb.active
        ws.append(["id", "Input"])
        ws.append([1, "a.mkv"])
        ws.append([2, None])
        ws.append([3, "b.mkv"])
        wb.save(path)
        assert read_input_file(path) == ["a.mkv", "b.mkv"]

    def test_excel_without_input_column(self, tmp_path):
        path = tmp_path / "names.xlsx"
        wb = Workbook()
        wb.active.append(["filename"])
        wb.save(path)
        with pytest.raises(ValueError, match="'input' column"):
            read_input_file(path)

    def test_json(self, reference_file):
        assert read_input_file(reference_file) == ["[Group] Title - 01-02.mkv", "Other - 05"]


class TestMetrics:
    def test_blind_metrics(self, parser):
        rows = [parse_filename(parser, n) for n in ["Title - 01", "[Group]"]]
        metrics = calculate_blind_metrics(rows)
        assert metrics["total_rows"] == 2
        assert metrics["title_rate"] == 0.5
        assert metrics["field_coverage"]["episode_number"] == 0.5
        assert metrics["field_coverage"]["release_group"] == 0.5

    def test_blind_metrics_empty(self):
        metrics = calculate_blind_metrics([])
        assert metrics["total_rows"] == 0
        assert metrics["field_coverage"] == {}

    def test_reference_metrics(self, parser, reference_file):
        cases = load_reference_cases(reference_file)
        rows = [parse_filename(parser, c.file_name) for c in cases]
        metrics = calculate_reference_metrics(rows, cases, samples=5)

        assert metrics["summary"]["total_files"] == 2
        assert metrics["summary"]["files_perfectly_parsed"] == 1
        assert metrics["key_metrics"]["perfect_rate"] == 50.0
        title = metrics["field_breakdown"]["anime_title"]
        assert title["accuracy_opportunities"] == 2
        assert title["accurate_count"] == 1
        mismatch_types = {(m["field"], m["type"]) for m in metrics["sample_mismatches"]}
        assert ("anime_title", "incorrect") in mismatch_types

    def test_reference_metrics_false_positive(self):
        rows = [ParsedRow(input="x", fields={"anime_title": "x", "anime_year": "2008"})]
        cases = [ReferenceCase(file_name="x", expected={"anime_title": "x"})]
        metrics = calculate_reference_metrics(rows, cases)
        assert metrics["summary"]["false_positives"] == 1
        assert metrics["field_breakdown"]["anime_year"]["false_positive_count"] == 1

    def test_reference_metrics_count_mismatch(self):
        with pytest.raises(ValueError, match="Row count mismatch"):
            calculate_reference_metrics([ParsedRow(input="x")], [])


class TestOutputs:
    def test_diff_rows(self):
        rows = [ParsedRow(input="x", fields={"anime_title": "A", "episode_number": "01"})]
        cases = [ReferenceCase(file_name="x", expected={"anime_title": "B", "episode_number": "01"})]
        diff = create_diff_rows(rows, cases)[0]
        assert diff.get("episode_number") == "01"
        assert json.loads(diff.get("anime_title")) == {"expected": "B", "returned": "A"}
        assert is_discrepancy_value(diff.get("anime_title"))
        assert not is_discrepancy_value(diff.get("episode_number"))
        assert not is_discrepancy_value(None)

    def test_reference_workbook_has_diff_sheet(self, parser, reference_file, tmp_path):
        cases = load_reference_cases(reference_file)
        rows = [parse_filename(parser, c.file_name) for c in cases]
        output = write_excel_output(rows, tmp_path / "out.xlsx", "reference", cases=cases)

        wb = load_workbook(output)
        try:
            assert wb.sheetnames == ["Results", "Diff"]
            ws = wb["Diff"]
            title_col = ParsedRow.get_headers().index("anime_title") + 1
            # Second case has the wrong title in the reference
            assert ws.cell(row=3, column=title_col).fill.fill_type == "solid"
            assert ws.cell(row=2, column=title_col).fill.fill_type != "solid"
        finally:
            wb.close()

    def test_blind_workbook(self, parser, tmp_path):
        rows = [parse_filename(parser, "Title - 01")]
        output = write_excel_output(rows, tmp_path / "out.xlsx", "blind")
        wb = load_workbook(output)
        try:
            assert wb.sheetnames == ["Results"]
            assert [c.value for c in wb["Results"][1]][:2] == ["input", FIELD_NAMES[0]]
        finally:
            wb.close()

    def test_json_metrics(self, tmp_path):
        output = write_json_metrics({"mode": "blind"}, tmp_path / "m" / "metrics.json")
        assert json.loads(output.read_text(encoding="utf-8")) == {"mode": "blind"}


class TestCommandLine:
    def test_evaluate_reference(self, reference_file, tmp_path):
        excel = tmp_path / "out.xlsx"
        metrics = tmp_path / "out.json"
        code = evaluate_main([
            "--mode", "reference",
            "--input", str(reference_file),
            "--output-excel", str(excel),
            "--output-json", str(metrics),
        ])
        assert code == 0
        assert excel.exists()
        assert json.loads(metrics.read_text(encoding="utf-8"))["mode"] == "reference"

    def test_evaluate_dry_run(self, tmp_path, capsys):
        names = tmp_path / "names.txt"
        names.write_text("Title - 01\n", encoding="utf-8")
        assert evaluate_main(["--input", str(names), "--no-write"]) == 0
        assert "Dry-run complete" in capsys.readouterr().out

    def test_evaluate_bad_config(self, tmp_path):
        names = tmp_path / "names.txt"
        names.write_text("Title - 01\n", encoding="utf-8")
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"bogus": True}), encoding="utf-8")
        assert evaluate_main(["--input", str(names), "--config", str(config), "--no-write"]) == 2

    def test_validate_dictionaries(self, capsys):
        assert validate_main([]) == 0
        assert "validated successfully" in capsys.readouterr().out

    def test_validate_missing_dictionary(self, capsys):
        assert validate_main(["missing.json"]) == 1
        assert "missing or unreadable" in capsys.readouterr().out
