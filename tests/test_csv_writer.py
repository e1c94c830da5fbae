"""Tests for CSV export and the command-line entry point."""
from __future__ import annotations

import csv
import json

from partner_email_parser.models import ParsingResult
from partner_email_parser.run import main
from partner_email_parser.writers.csv_writer import CSVWriter


def _read_csv(path):
    with open(path, newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


class TestCSVWriter:

    def test_rows_and_columns(self, tmp_path):
        results = [
            ParsingResult(filename="a.eml", project_name="Atlas", partner_name="王经理",
                          partner_email="wang@brand.cn", communication_stage="after-service",
                          success=True, email_subject="RE: Atlas", email_date="2026-03-02"),
            ParsingResult(filename="b.eml", success=False,
                          error_reason="project name not recognized"),
        ]
        path = tmp_path / "out" / "results.csv"
        assert CSVWriter(str(path)).write(results) == 2

        rows = _read_csv(path)
        assert list(rows[0]) == [h for _, h in CSVWriter.COLUMNS]
        assert rows[0]["Partner Name"] == "王经理"
        assert rows[0]["Extraction Succeeded"] == "yes"
        assert rows[0]["Communication Sub-Stage"] == ""
        assert rows[1]["Extraction Succeeded"] == "no"
        assert rows[1]["Failure Reason"] == "project name not recognized"


class TestCLI:

    def _workspace(self, tmp_path, eml, duplicate_ids=False):
        emails = tmp_path / "emails"
        emails.mkdir()
        (emails / "atlas.eml").write_bytes(eml(subject="RE: Project Atlas kickoff"))
        (emails / "broken.eml").write_bytes(b"\x00\x01\x02 this is not an email")
        second_id = "p1" if duplicate_ids else "p2"
        projects = tmp_path / "projects.yml"
        projects.write_text(
            "projects:\n"
            "  - {id: p1, name: Atlas}\n"
            f"  - {{id: {second_id}, name: Nova Launch}}\n",
            encoding="utf-8",
        )
        return emails, projects

    def test_run_writes_outputs(self, tmp_path, eml, monkeypatch):
        monkeypatch.setattr("partner_email_parser.run.setup_logging", lambda *a, **k: None)
        emails, projects = self._workspace(tmp_path, eml)
        csv_path = tmp_path / "out.csv"
        json_path = tmp_path / "out.json"

        code = main([
            "--emails", str(emails),
            "--projects", str(projects),
            "--stages", str(tmp_path / "missing-stages.yml"),
            "--no-ai",
            "--csv", str(csv_path),
            "--json", str(json_path),
        ])

        assert code == 0
        data = json.loads(json_path.read_text(encoding="utf-8"))
        assert data["summary"]["total"] == 2
        assert data["summary"]["successful"] == 1
        assert [r["filename"] for r in data["results"]] == ["atlas.eml", "broken.eml"]
        assert data["results"][0]["projectName"] == "Atlas"
        assert len(data["errors"]) == 1
        assert len(_read_csv(csv_path)) == 2

    def test_invalid_config_exits_2(self, tmp_path, eml, monkeypatch):
        monkeypatch.setattr("partner_email_parser.run.setup_logging", lambda *a, **k: None)
        emails, projects = self._workspace(tmp_path, eml, duplicate_ids=True)
        code = main(["--emails", str(emails), "--projects", str(projects), "--no-ai"])
        assert code == 2
