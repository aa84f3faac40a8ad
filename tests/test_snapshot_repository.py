"""Tests del snapshot SQL (SQLite en fichero temporal)."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine

from payroll_anomaly.ml_service.models.anomaly_model import (
    AnomalyAction,
    AnomalyRecord,
    AnomalySeverity,
    AnomalyStatus,
    ReputationRecord,
)
from payroll_anomaly.ml_service.repository.snapshot_repository import (
    ensure_schema,
    load_anomalies,
    load_reputations,
    save_anomalies,
    save_reputations,
)

T0 = datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(f"sqlite:///{tmp_path / 'snapshot.db'}", future=True)
    with eng.begin() as conn:
        ensure_schema(conn)
    yield eng
    eng.dispose()


def _anomaly(anomaly_id: str, minute: int, **overrides) -> AnomalyRecord:
    values = dict(
        id=anomaly_id,
        employee_id="emp-s",
        employee_name="Sam",
        company_id="company-1",
        detected_at=T0.replace(minute=minute),
        severity=AnomalySeverity.HIGH,
        status=AnomalyStatus.PENDING_REVIEW,
        action=AnomalyAction.CEO_MANUAL_REVIEW,
        anomaly_score=0.795,
        reputation_score=67,
        features={"duration_hours": 15.5, "is_weekend": True, "day_of_week": 6},
        reasons=["Unusually long shift: 15.5h", "Entry logged on a weekend"],
        time_entry_id="te-s",
    )
    values.update(overrides)
    return AnomalyRecord(**values)


class TestReputationSnapshot:

    def test_empty_store(self, engine):
        with engine.begin() as conn:
            assert save_reputations(conn, []) == 0
            assert load_reputations(conn) == []

    def test_save_and_load(self, engine):
        records = [
            ReputationRecord(employee_id="e2", score=77, last_updated=T0),
            ReputationRecord(employee_id="e1", score=59, last_updated=T0, anomaly_count=2, confirmed_anomaly_count=1),
        ]
        with engine.begin() as conn:
            assert save_reputations(conn, records) == 2
        with engine.begin() as conn:
            loaded = load_reputations(conn)

        assert [r.employee_id for r in loaded] == ["e1", "e2"]
        assert loaded[0] == records[1]
        assert loaded[0].last_updated.tzinfo is not None

    def test_upsert_overwrites(self, engine):
        with engine.begin() as conn:
            save_reputations(conn, [ReputationRecord(employee_id="e1", score=75, last_updated=T0)])
            save_reputations(conn, [ReputationRecord(employee_id="e1", score=67, last_updated=T0, anomaly_count=1)])
            loaded = load_reputations(conn)

        assert len(loaded) == 1
        assert loaded[0].score == 67
        assert loaded[0].anomaly_count == 1


class TestAnomalySnapshot:

    def test_save_and_load_preserves_record(self, engine):
        record = _anomaly("anomaly-1", 0)
        with engine.begin() as conn:
            save_anomalies(conn, [record])
        with engine.begin() as conn:
            loaded = load_anomalies(conn)

        assert loaded == [record]
        assert loaded[0].features["is_weekend"] is True

    def test_loaded_in_detection_order(self, engine):
        with engine.begin() as conn:
            save_anomalies(conn, [_anomaly("anomaly-b", 5), _anomaly("anomaly-a", 1)])
            loaded = load_anomalies(conn)

        assert [a.id for a in loaded] == ["anomaly-a", "anomaly-b"]

    def test_resolution_overwrites_previous_version(self, engine):
        with engine.begin() as conn:
            save_anomalies(conn, [_anomaly("anomaly-1", 0)])
            save_anomalies(
                conn,
                [
                    _anomaly(
                        "anomaly-1",
                        0,
                        status=AnomalyStatus.CONFIRMED,
                        resolved_by="ceo-1",
                        resolved_at=T0.replace(hour=13),
                        rebalance_tx_hash="0xabc",
                    )
                ],
            )
            loaded = load_anomalies(conn)

        assert len(loaded) == 1
        assert loaded[0].status == AnomalyStatus.CONFIRMED
        assert loaded[0].resolved_by == "ceo-1"
        assert loaded[0].resolved_at == T0.replace(hour=13)
        assert loaded[0].rebalance_tx_hash == "0xabc"
        # La foto de reputación no se toca
        assert loaded[0].reputation_score == 67
