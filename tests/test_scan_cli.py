"""Tests del job de scan (CLI + runner con snapshot SQLite)."""

import json

import pytest

from payroll_anomaly.jobs.scan.cli import build_parser, main


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # Sin .env real ni variables heredadas
    monkeypatch.setenv("PAYROLL_ANOMALY_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.delenv("PAYROLL_ANOMALY_DB_URL", raising=False)
    monkeypatch.setenv("PAYROLL_ANOMALY_LOG_LEVEL", "WARNING")
    for name in ("ANOMALY_SCORE_THRESHOLD", "ANOMALY_N_ESTIMATORS", "ANOMALY_MAX_SAMPLES", "REPUTATION_DEFAULT_SCORE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def input_file(tmp_path, scan_batch):
    payload = {
        key: [item.model_dump(mode="json") for item in items]
        for key, items in scan_batch.items()
    }
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, (json.loads(out) if code == 0 else None)


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["--input", "x.json"])
        assert args.company_id == "default"
        assert args.today is None
        assert args.seed is None
        assert args.persist is False

    def test_rejects_bad_date(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--input", "x.json", "--today", "20-10-2026"])


class TestScanCli:

    def test_scan_prints_result(self, capsys, input_file):
        code, out = _run(capsys, "--input", str(input_file), "--company-id", "company-1", "--today", "2026-10-20", "--seed", "7")

        assert code == 0
        assert out["scanned_entries"] == 7
        assert out["total_anomalies"] == 1
        assert out["review_triggered"] == 1

        anomaly = out["anomalies"][0]
        assert anomaly["employee_id"] == "emp-s"
        assert anomaly["company_id"] == "company-1"
        assert anomaly["severity"] == "high"
        assert anomaly["status"] == "pending_review"
        assert anomaly["action"] == "ceo_manual_review"
        assert anomaly["reputation_score"] == 67

    def test_missing_input_returns_error(self, capsys, tmp_path):
        code, _ = _run(capsys, "--input", str(tmp_path / "nope.json"), "--today", "2026-10-20")
        assert code == 1

    def test_invalid_input_returns_error(self, capsys, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"time_entries": [{"id": "t1", "employee_id": "e1"}]}), encoding="utf-8")

        code, _ = _run(capsys, "--input", str(bad), "--today", "2026-10-20")
        assert code == 1

    def test_persisted_reputation_carries_over(self, capsys, tmp_path, input_file):
        db_url = f"sqlite:///{tmp_path / 'state.db'}"
        argv = ["--input", str(input_file), "--today", "2026-10-20", "--seed", "7", "--persist", "--db-url", db_url]

        _, first = _run(capsys, *argv)
        _, second = _run(capsys, *argv)

        assert first["anomalies"][0]["reputation_score"] == 67
        assert second["anomalies"][0]["reputation_score"] == 59
        assert first["anomalies"][0]["id"] != second["anomalies"][0]["id"]
