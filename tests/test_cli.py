"""
End-to-end tests for the scorebook command line.
"""
import json

import pytest

from scorebook.cli import main


@pytest.fixture
def run(tmp_path, capsys):
    """Run the CLI against a private data directory; returns (code, out, err)."""
    def _run(*args):
        code = main([
            "--data-dir", str(tmp_path / "data"),
            "--config", str(tmp_path / "no-settings.json"),
            *args,
        ])
        captured = capsys.readouterr()
        return code, captured.out, captured.err
    return _run


@pytest.fixture
def lab(run, tmp_path, rubric):
    path = tmp_path / "lab.json"
    path.write_text(json.dumps(rubric.to_dict()))
    code, out, _ = run("import-assignment", str(path))
    assert code == 0
    return out.strip()


class TestCli:

    def test_new_then_list(self, run):
        code, out, _ = run("new", "Essay")
        assert code == 0
        assignment_id = out.strip()

        code, out, _ = run("list")
        assert code == 0
        assert out.startswith(f"{assignment_id}\tEssay\t0 question(s)\t0 submission(s)")

    def test_import_assignment_prints_id(self, lab):
        assert lab == "a1"

    def test_grade_then_transcript_and_csv(self, run, lab, tmp_path):
        code, out, _ = run("grade", "a1", "S1", "--name", "Ada", "--select", "q1:c1", "q2:c3")
        assert code == 0
        submission_id, score = out.strip().split("\t")
        assert score == "88"

        code, out, _ = run("transcript", submission_id)
        assert code == 0
        assert out == "# Q1\n\n- wrong formula (-10)\n\n# Q2\n\n- missing units (-2)\n"

        target = tmp_path / "grades.csv"
        code, _, _ = run("export-csv", "a1", "-o", str(target))
        assert code == 0
        assert target.read_text() == (
            "Student ID,Name,Score,Comments\n"
            'S1,Ada,88,"wrong formula; missing units"\n'
        )

    def test_grade_when_bad_pair_then_error(self, run, lab):
        code, _, err = run("grade", "a1", "S1", "--select", "q1-c1")
        assert code == 1
        assert "Expected QID:CID" in err

    def test_markdown_round_trip(self, run, lab, tmp_path):
        code, out, _ = run("to-markdown", "a1")
        assert code == 0
        assert "# Q1 <!-- id:q1 -->" in out

        edited = tmp_path / "rubric.md"
        edited.write_text(out.replace("late (-5)", "late (-7)"))
        code, out, _ = run("from-markdown", "a1", str(edited))
        assert code == 0
        assert out.strip() == "2 question(s), 4 comment(s)"

        _, out, _ = run("to-markdown", "a1")
        assert "late (-7)" in out

    def test_from_markdown_when_file_missing_then_error(self, run, lab, tmp_path):
        code, _, err = run("from-markdown", "a1", str(tmp_path / "missing.md"))
        assert code == 1
        assert "error: File not found" in err

    def test_unknown_assignment_then_error(self, run):
        code, _, err = run("export-csv", "nope")
        assert code == 1
        assert "Assignment not found: nope" in err

    def test_unknown_submission_then_error(self, run):
        code, _, err = run("transcript", "nope")
        assert code == 1
        assert "Submission not found" in err

    def test_import_assignment_when_invalid_then_error(self, run, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"id": "x"}))
        code, _, err = run("import-assignment", str(path))
        assert code == 1
        assert "error:" in err

    def test_backup_then_import_into_fresh_directory(self, run, lab, tmp_path, capsys):
        run("grade", "a1", "S1", "--select", "q1:c2")
        backup = tmp_path / "backup.json"
        code, _, _ = run("backup", "-o", str(backup))
        assert code == 0
        document = json.loads(backup.read_text())
        assert [a["id"] for a in document["assignments"]] == ["a1"]
        assert len(document["submissions"]) == 1

        code = main([
            "--data-dir", str(tmp_path / "fresh"),
            "--config", str(tmp_path / "no-settings.json"),
            "import-backup", str(backup),
        ])
        assert code == 0
        capsys.readouterr()

        code = main([
            "--data-dir", str(tmp_path / "fresh"),
            "--config", str(tmp_path / "no-settings.json"),
            "score", "a1",
        ])
        out = capsys.readouterr().out
        assert code == 0
        assert out.strip() == "S1\t\t95"

    def test_base_score_option(self, run, lab):
        code, out, _ = run("--base-score", "50", "grade", "a1", "S1", "--select", "q1:c1")
        assert code == 0
        assert out.strip().endswith("\t40")

    def test_base_score_option_when_invalid_then_error(self, run):
        code, _, err = run("--base-score", "-5", "list")
        assert code == 1
        assert "error: base_score must be positive" in err

    def test_import_assignment_when_not_utf8_then_error(self, run, tmp_path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        code, _, err = run("import-assignment", str(path))
        assert code == 1
        assert "error: Invalid JSON in binary.json" in err
