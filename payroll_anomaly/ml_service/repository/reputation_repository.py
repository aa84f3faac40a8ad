from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from payroll_anomaly.ml_service.models.anomaly_model import ReputationRecord


class InMemoryReputationStore:
    """Mapa mutable employee_id -> ReputationRecord.

    Devuelve siempre copias; los cambios se guardan con ``put``.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ReputationRecord] = {}

    def __contains__(self, employee_id: str) -> bool:
        return employee_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, employee_id: str) -> Optional[ReputationRecord]:
        record = self._records.get(employee_id)
        return replace(record) if record is not None else None

    def put(self, record: ReputationRecord) -> None:
        self._records[record.employee_id] = replace(record)

    def put_many(self, records: Iterable[ReputationRecord]) -> None:
        for record in records:
            self.put(record)

    def all(self) -> List[ReputationRecord]:
        return [replace(r) for r in self._records.values()]
