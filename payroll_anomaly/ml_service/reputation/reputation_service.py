"""Servicio de reputación por empleado.

La reputación (0-100, inicial 75) se ajusta según los resultados del scan:

- Anomalía detectada   -> score -= penalty (mínimo 0)
- Scan limpio          -> score += recovery (máximo 100)
- Anomalía confirmada  -> score -= penalty otra vez, aparte de la de detección

La acción ante una anomalía depende solo del score actual:

- score < low_threshold  -> rebalanceo automático (USYC)
- resto                  -> revisión manual
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from payroll_anomaly.common.dates import utc_now
from payroll_anomaly.ml_service.config.ml_config import ReputationConfig
from payroll_anomaly.ml_service.models.anomaly_model import AnomalyAction, ReputationRecord
from payroll_anomaly.ml_service.repository.reputation_repository import InMemoryReputationStore

logger = logging.getLogger(__name__)


def decide_action_for_score(score: int, cfg: ReputationConfig) -> AnomalyAction:
    if score < cfg.low_threshold:
        return AnomalyAction.USYC_REBALANCE
    return AnomalyAction.CEO_MANUAL_REVIEW


class ReputationService:
    def __init__(
        self,
        cfg: ReputationConfig,
        store: Optional[InMemoryReputationStore] = None,
        clock: Callable = utc_now,
    ) -> None:
        self.cfg = cfg
        self._store = store if store is not None else InMemoryReputationStore()
        self._clock = clock

    def _get_or_init(self, employee_id: str) -> ReputationRecord:
        record = self._store.get(employee_id)
        if record is None:
            record = ReputationRecord(
                employee_id=employee_id,
                score=self.cfg.default_score,
                last_updated=self._clock(),
            )
            self._store.put(record)
        return record

    def _clamp(self, score: int) -> int:
        return max(self.cfg.min_score, min(self.cfg.max_score, score))

    def get_reputation(self, employee_id: str) -> ReputationRecord:
        return self._get_or_init(employee_id)

    def get_reputations(self, employee_ids: Iterable[str]) -> List[ReputationRecord]:
        return [self._get_or_init(eid) for eid in employee_ids]

    def penalize(self, employee_id: str) -> ReputationRecord:
        record = self._get_or_init(employee_id)
        record.score = self._clamp(record.score - self.cfg.penalty_per_anomaly)
        record.anomaly_count += 1
        record.last_updated = self._clock()
        self._store.put(record)
        logger.debug("reputation_penalize employee=%s score=%d", employee_id, record.score)
        return record

    def recover(self, employee_id: str) -> ReputationRecord:
        record = self._get_or_init(employee_id)
        record.score = self._clamp(record.score + self.cfg.recovery_per_clean_scan)
        record.last_updated = self._clock()
        self._store.put(record)
        return record

    def confirm(self, employee_id: str) -> ReputationRecord:
        record = self._get_or_init(employee_id)
        record.confirmed_anomaly_count += 1
        record.score = self._clamp(record.score - self.cfg.penalty_per_anomaly)
        record.last_updated = self._clock()
        self._store.put(record)
        logger.info(
            "reputation_confirm employee=%s score=%d confirmed=%d",
            employee_id,
            record.score,
            record.confirmed_anomaly_count,
        )
        return record

    def decide_action(self, employee_id: str) -> AnomalyAction:
        return decide_action_for_score(self._get_or_init(employee_id).score, self.cfg)

    def load(self, records: Iterable[ReputationRecord]) -> None:
        """Carga masiva (p.ej. snapshot persistido al arrancar)."""
        self._store.put_many(records)

    def export(self) -> List[ReputationRecord]:
        return self._store.all()
