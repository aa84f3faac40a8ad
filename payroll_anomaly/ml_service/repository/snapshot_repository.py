"""Snapshot SQL de reputaciones y anomalías.

Passthrough para que el host persista el estado entre procesos. SQL
portable (SQLite / Postgres / SQL Server) vía ``sqlalchemy.text``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import List

from sqlalchemy import text
from sqlalchemy.engine import Connection

from payroll_anomaly.ml_service.models.anomaly_model import AnomalyRecord, ReputationRecord

logger = logging.getLogger(__name__)


def ensure_schema(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS anomaly_reputations (
              employee_id VARCHAR(128) PRIMARY KEY,
              score INTEGER NOT NULL,
              last_updated VARCHAR(40) NOT NULL,
              anomaly_count INTEGER NOT NULL DEFAULT 0,
              confirmed_anomaly_count INTEGER NOT NULL DEFAULT 0
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS anomaly_records (
              id VARCHAR(128) PRIMARY KEY,
              employee_id VARCHAR(128) NOT NULL,
              company_id VARCHAR(128) NOT NULL,
              detected_at VARCHAR(40) NOT NULL,
              severity VARCHAR(16) NOT NULL,
              status VARCHAR(32) NOT NULL,
              payload TEXT NOT NULL
            )
            """
        )
    )


def save_reputations(conn: Connection, records: List[ReputationRecord]) -> int:
    if not records:
        return 0

    rows = [
        {
            "employee_id": r.employee_id,
            "score": r.score,
            "last_updated": r.last_updated.isoformat(),
            "anomaly_count": r.anomaly_count,
            "confirmed_anomaly_count": r.confirmed_anomaly_count,
        }
        for r in records
    ]
    conn.execute(
        text("DELETE FROM anomaly_reputations WHERE employee_id = :employee_id"),
        [{"employee_id": row["employee_id"]} for row in rows],
    )
    conn.execute(
        text(
            """
            INSERT INTO anomaly_reputations (
              employee_id, score, last_updated, anomaly_count, confirmed_anomaly_count
            )
            VALUES (
              :employee_id, :score, :last_updated, :anomaly_count, :confirmed_anomaly_count
            )
            """
        ),
        rows,
    )
    logger.info("snapshot_save_reputations rows=%d", len(rows))
    return len(rows)


def load_reputations(conn: Connection) -> List[ReputationRecord]:
    rows = conn.execute(
        text(
            """
            SELECT employee_id, score, last_updated, anomaly_count, confirmed_anomaly_count
            FROM anomaly_reputations
            ORDER BY employee_id
            """
        )
    ).fetchall()

    return [
        ReputationRecord(
            employee_id=str(row.employee_id),
            score=int(row.score),
            last_updated=datetime.fromisoformat(row.last_updated),
            anomaly_count=int(row.anomaly_count or 0),
            confirmed_anomaly_count=int(row.confirmed_anomaly_count or 0),
        )
        for row in rows
    ]


def save_anomalies(conn: Connection, records: List[AnomalyRecord]) -> int:
    """Upsert por id; los registros resueltos sobrescriben su versión anterior."""

    if not records:
        return 0

    rows = []
    for r in records:
        data = r.to_dict()
        rows.append(
            {
                "id": r.id,
                "employee_id": r.employee_id,
                "company_id": r.company_id,
                "detected_at": data["detected_at"],
                "severity": data["severity"],
                "status": data["status"],
                "payload": json.dumps(data),
            }
        )

    conn.execute(
        text("DELETE FROM anomaly_records WHERE id = :id"),
        [{"id": row["id"]} for row in rows],
    )
    conn.execute(
        text(
            """
            INSERT INTO anomaly_records (
              id, employee_id, company_id, detected_at, severity, status, payload
            )
            VALUES (
              :id, :employee_id, :company_id, :detected_at, :severity, :status, :payload
            )
            """
        ),
        rows,
    )
    logger.info("snapshot_save_anomalies rows=%d", len(rows))
    return len(rows)


def load_anomalies(conn: Connection) -> List[AnomalyRecord]:
    """Anomalías en orden de detección ascendente (orden del ledger)."""

    rows = conn.execute(
        text("SELECT payload FROM anomaly_records ORDER BY detected_at ASC, id ASC")
    ).fetchall()
    return [AnomalyRecord.from_dict(json.loads(row.payload)) for row in rows]
