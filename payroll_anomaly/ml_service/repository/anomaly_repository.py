"""Ledger de anomalías en memoria.

Secuencia append-only: los registros nunca se borran ni se reordenan; solo
se actualizan in-place por id los campos de resolución y la referencia de
remediación.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from payroll_anomaly.ml_service.models.anomaly_model import AnomalyRecord, AnomalyStatus


class AnomalyNotFoundError(LookupError):
    """No existe ninguna anomalía con ese id."""

    def __init__(self, anomaly_id: str):
        self.anomaly_id = anomaly_id
        super().__init__(f"anomaly '{anomaly_id}' not found")


def _copy(record: AnomalyRecord) -> AnomalyRecord:
    return replace(record, features=dict(record.features), reasons=list(record.reasons))


class InMemoryAnomalyLedger:
    def __init__(self) -> None:
        self._records: List[AnomalyRecord] = []
        self._by_id: Dict[str, AnomalyRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: AnomalyRecord) -> None:
        if record.id in self._by_id:
            raise ValueError(f"duplicate anomaly id '{record.id}'")
        stored = _copy(record)
        self._records.append(stored)
        self._by_id[stored.id] = stored

    def extend(self, records: Iterable[AnomalyRecord]) -> None:
        for record in records:
            self.append(record)

    def get(self, anomaly_id: str) -> AnomalyRecord:
        return _copy(self._get(anomaly_id))

    def _get(self, anomaly_id: str) -> AnomalyRecord:
        record = self._by_id.get(anomaly_id)
        if record is None:
            raise AnomalyNotFoundError(anomaly_id)
        return record

    def all(self) -> List[AnomalyRecord]:
        """Copia de todos los registros en orden de inserción."""
        return [_copy(r) for r in self._records]

    def query(
        self,
        employee_id: Optional[str] = None,
        status: Optional[AnomalyStatus] = None,
    ) -> List[AnomalyRecord]:
        results = self._records
        if employee_id:
            results = [r for r in results if r.employee_id == employee_id]
        if status:
            results = [r for r in results if r.status == status]
        ordered = sorted(results, key=lambda r: r.detected_at, reverse=True)
        return [_copy(r) for r in ordered]

    def mark_resolved(
        self,
        anomaly_id: str,
        status: AnomalyStatus,
        resolved_by: str,
        resolved_at: datetime,
    ) -> AnomalyRecord:
        record = self._get(anomaly_id)
        record.status = status
        record.resolved_by = resolved_by
        record.resolved_at = resolved_at
        return _copy(record)

    def set_rebalance_reference(self, anomaly_id: str, reference: str) -> AnomalyRecord:
        record = self._get(anomaly_id)
        record.rebalance_tx_hash = reference
        return _copy(record)
