"""Tests for text, CSV and JSON reports."""

import json

import numpy as np
import pytest

from sasc.core.analysis import AnalysisResult, analyze
from sasc.core.grouping import build_groups
from sasc.core.loader import collect_files
from sasc.core.reporting import (
    CSV_CORNER,
    DisplayNames,
    Reporter,
    read_csv,
    render_distances,
    render_groups,
    write_csv,
)
from sasc.errors import ReportWriteError


@pytest.fixture
def result(submissions):
    return analyze(collect_files(submissions, "txt"), threshold=1)


class TestDisplayNames:

    def test_relative_to_base(self, tmp_path):
        names = DisplayNames(tmp_path)
        assert names(tmp_path / "sub" / "a.go") == "./sub/a.go"
        assert names("b.go") == "./b.go"

    def test_outside_base_unchanged(self, tmp_path):
        names = DisplayNames(tmp_path / "inner")
        outside = str(tmp_path / "a.go")
        assert names(outside) == outside

    def test_names(self, tmp_path):
        names = DisplayNames(tmp_path)
        assert names.names([tmp_path / "a", tmp_path / "b"]) == ["./a", "./b"]


class TestRenderText:
    """Test the console report sections."""

    def test_distances_section(self, result, submissions):
        text = render_distances(result.matrix, DisplayNames(submissions), result.threshold)

        assert text.startswith("\nDISTANCIAS\n\n")
        block = (
            "./alumno1/main.txt\n"
            "\t    0.00 ./alumno2/main.txt\n"
            "\t    1.00 ./alumno3/main.txt\n"
            "\n"
        )
        assert block in text
        # Nothing within the threshold of the unrelated file
        assert "./alumno4/main.txt\n\n" in text

    def test_distances_without_threshold_lists_everything(self, submissions):
        result = analyze(collect_files(submissions, "txt"))

        text = render_distances(result.matrix, DisplayNames(submissions))

        # 4 headers, 3 neighbours each
        assert text.count("\t") == 12
        assert "\t   48.06 ./alumno4/main.txt" in text

    def test_groups_section(self, line_matrix, tmp_path):
        matrix = line_matrix([0, 4, 8], names=["A.go", "B.go", "C.go"])
        groups = build_groups(matrix, 5)

        text = render_groups(groups, DisplayNames(tmp_path))

        assert text == (
            "\nGRUPOS\n\n"
            "GRUPO 1 (./A.go)\n"
            "\t./A.go\n"
            "\t./B.go\n"
            "\n"
            "GRUPO 2 (./B.go)\n"
            "\t./A.go  [también en el grupo de ./A.go]\n"
            "\t./B.go  [también en el grupo de ./A.go]\n"
            "\t./C.go\n"
            "\n"
        )

    def test_render_text_puts_groups_first(self, result, submissions):
        text = Reporter(submissions).render_text(result)

        assert text.index("GRUPOS") < text.index("DISTANCIAS")
        assert "GRUPO 1 (./alumno1/main.txt)" in text
        assert "GRUPO 2" not in text

    def test_render_text_without_groups(self, result, submissions):
        text = Reporter(submissions).render_text(result, show_groups=False)
        assert "GRUPOS" not in text

    def test_no_groups_section_without_threshold(self, submissions):
        result = analyze(collect_files(submissions, "txt"))
        assert "GRUPOS" not in Reporter(submissions).render_text(result)


class TestCsv:
    """Test the tab-delimited distance table."""

    def test_layout(self, result, submissions, tmp_path):
        path = tmp_path / "tabla.csv"

        write_csv(result.matrix, DisplayNames(submissions), path)

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "\t".join([
            CSV_CORNER,
            "./alumno1/main.txt",
            "./alumno2/main.txt",
            "./alumno3/main.txt",
            "./alumno4/main.txt",
        ])
        assert lines[1].split("\t")[:4] == ["./alumno1/main.txt", "0.00", "0.00", "1.00"]
        assert len(lines) == 5

    def test_full_matrix_ignores_threshold(self, result, submissions, tmp_path):
        path = Reporter(submissions).write_csv(result, tmp_path / "tabla.csv")

        names, values = read_csv(path)

        assert len(names) == 4
        assert values.shape == (4, 4)
        assert np.array_equal(values, values.T)
        assert not np.diag(values).any()
        np.testing.assert_allclose(values, result.matrix.as_array(), atol=0.005)

    def test_unwritable_destination(self, result, tmp_path):
        with pytest.raises(ReportWriteError) as exc_info:
            write_csv(result.matrix, DisplayNames(tmp_path), tmp_path / "missing" / "t.csv")
        assert exc_info.value.path.endswith("t.csv")

    def test_read_rejects_other_tables(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("a\tb\nc\td\n", encoding="utf-8")

        with pytest.raises(ValueError):
            read_csv(path)


class TestJson:
    """Test the JSON report."""

    def test_document(self, result, submissions):
        data = json.loads(Reporter(submissions).render_json(result))

        assert data["metadata"]["tool"] == "sasc"
        assert data["summary"] == {"files": 4, "threshold": 1.0, "groups": 1}
        assert data["names"][0] == "./alumno1/main.txt"
        assert data["matrix"][0][2] == 1.0
        assert data["files"][0]["bytes"] == 4
        assert [n["name"] for n in data["files"][0]["neighbours"]] == [
            "./alumno2/main.txt",
            "./alumno3/main.txt",
        ]
        assert data["groups"][0]["center"] == "./alumno1/main.txt"
        assert data["groups"][0]["members"][0]["owner"] == "./alumno1/main.txt"

    def test_groups_null_without_threshold(self, submissions):
        result = analyze(collect_files(submissions, "txt"))

        data = json.loads(Reporter(submissions).render_json(result))

        assert data["groups"] is None
        assert data["summary"]["groups"] is None

    def test_write_json(self, result, submissions, tmp_path):
        path = Reporter(submissions).write_json(result, tmp_path / "report.json")
        assert json.loads(path.read_text(encoding="utf-8"))["summary"]["files"] == 4

    def test_write_json_failure(self, result, submissions, tmp_path):
        with pytest.raises(ReportWriteError):
            Reporter(submissions).write_json(result, tmp_path / "no" / "report.json")


class TestAnalysisResult:

    def test_phases_and_timings(self, submissions):
        seen = []

        result = analyze(collect_files(submissions, "txt"), threshold=1, on_phase=seen.append)

        assert seen == ["features", "distances", "groups"]
        assert set(result.timings) == {"features", "distances", "groups"}
        assert isinstance(result, AnalysisResult)
        assert len(result.paths) == 4

    def test_no_grouping_phase_without_threshold(self, submissions):
        seen = []
        result = analyze(collect_files(submissions, "txt"), on_phase=seen.append)

        assert seen == ["features", "distances"]
        assert result.groups is None
