"""Agente de detección de anomalías en fichajes.

Orquesta el pipeline completo:
  1. Extraer features de los fichajes cerrados
  2. Entrenar un Isolation Forest nuevo sobre ese mismo lote
  3. Puntuar y marcar los fichajes por encima del umbral
  4. Penalizar reputación y decidir acción (rebalanceo automático o revisión manual)
  5. Guardar las anomalías en el ledger y recuperar reputación a los empleados limpios

El agente no hace locking: el host debe serializar ``scan`` y
``resolve_anomaly`` sobre el mismo ledger/almacén de reputación.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

from sklearn.utils import check_random_state

from payroll_anomaly.common.dates import utc_now
from payroll_anomaly.common.ids import create_id
from payroll_anomaly.ml.isolation_forest import PayrollIsolationForest
from payroll_anomaly.ml_service.config.ml_config import DEFAULT_ML_CONFIG, GlobalMLConfig
from payroll_anomaly.ml_service.explain.explanation_builder import build_reasons, severity_from_score
from payroll_anomaly.ml_service.features.feature_extractor import FeatureExtractor, to_matrix
from payroll_anomaly.ml_service.models.anomaly_model import (
    RESOLUTION_STATUSES,
    AnomalyAction,
    AnomalyRecord,
    AnomalySeverity,
    AnomalyStatus,
    AnomalySummary,
    ReputationRecord,
    ScanResult,
)
from payroll_anomaly.ml_service.models.timecard import (
    EmployeeRecord,
    PayRunRecord,
    ScheduleRecord,
    TimeEntryRecord,
)
from payroll_anomaly.ml_service.repository.anomaly_repository import InMemoryAnomalyLedger
from payroll_anomaly.ml_service.reputation.reputation_service import ReputationService

logger = logging.getLogger(__name__)

RECENT_ANOMALIES_LIMIT = 20
# Media de reputación cuando aún no hay empleados marcados
NO_FLAGGED_AVG_REPUTATION = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AnomalyDetectionAgent:
    def __init__(
        self,
        cfg: GlobalMLConfig = DEFAULT_ML_CONFIG,
        reputation: Optional[ReputationService] = None,
        ledger: Optional[InMemoryAnomalyLedger] = None,
        random_state=None,
        clock: Callable = utc_now,
    ) -> None:
        self.cfg = cfg
        self._clock = clock
        self.reputation = reputation if reputation is not None else ReputationService(cfg.reputation, clock=clock)
        self.ledger = ledger if ledger is not None else InMemoryAnomalyLedger()
        self._extractor = FeatureExtractor(cfg.anomaly)
        # Un único RandomState para que scans sucesivos con semilla no repitan árboles
        self._rng = check_random_state(random_state)

    def _new_forest(self) -> PayrollIsolationForest:
        return PayrollIsolationForest(
            n_estimators=self.cfg.anomaly.n_estimators,
            max_samples=self.cfg.anomaly.max_samples,
            random_state=self._rng,
        )

    def scan(
        self,
        employees: Sequence[EmployeeRecord],
        time_entries: Iterable[TimeEntryRecord],
        pay_runs: Iterable[PayRunRecord],
        schedules: Iterable[ScheduleRecord],
        company_id: str,
        today: date,
    ) -> ScanResult:
        """Ejecuta un scan completo sobre el lote recibido."""

        t0 = time.monotonic()
        observations = self._extractor.extract(employees, time_entries, pay_runs, schedules, today)

        if not observations:
            logger.info("anomaly_scan company=%s entries=0 (nothing to score)", company_id)
            return ScanResult.empty()

        # El bosque vive solo durante este scan
        forest = self._new_forest()
        matrix = to_matrix(observations)
        forest.fit(matrix)
        detections = forest.detect(matrix, self.cfg.anomaly.score_threshold)

        new_anomalies: List[AnomalyRecord] = []
        rebalance_triggered = 0
        review_triggered = 0

        for det in detections:
            obs = observations[det.index]
            employee = obs.employee

            reputation = self.reputation.penalize(employee.id)
            action = self.reputation.decide_action(employee.id)

            if action == AnomalyAction.USYC_REBALANCE:
                status = AnomalyStatus.REBALANCE_TRIGGERED
                rebalance_triggered += 1
            else:
                status = AnomalyStatus.PENDING_REVIEW
                review_triggered += 1

            anomaly = AnomalyRecord(
                id=create_id("anomaly"),
                employee_id=employee.id,
                employee_name=employee.name,
                company_id=company_id,
                detected_at=self._clock(),
                severity=severity_from_score(det.score, self.cfg.anomaly),
                status=status,
                action=action,
                anomaly_score=round(det.score, 3),
                reputation_score=reputation.score,
                features=obs.snapshot(),
                reasons=build_reasons(obs, det.score),
                time_entry_id=obs.entry.id,
            )
            new_anomalies.append(anomaly)

        flagged = {a.employee_id for a in new_anomalies}
        for employee in employees:
            if employee.id not in flagged:
                self.reputation.recover(employee.id)

        self.ledger.extend(new_anomalies)

        logger.info(
            "anomaly_scan company=%s ms=%.1f entries=%d anomalies=%d rebalance=%d review=%d",
            company_id,
            (time.monotonic() - t0) * 1000,
            len(observations),
            len(new_anomalies),
            rebalance_triggered,
            review_triggered,
        )

        return ScanResult(
            anomalies=new_anomalies,
            scanned_entries=len(observations),
            total_anomalies=len(new_anomalies),
            rebalance_triggered=rebalance_triggered,
            review_triggered=review_triggered,
        )

    def list_anomalies(
        self,
        employee_id: Optional[str] = None,
        status: Optional[AnomalyStatus] = None,
    ) -> List[AnomalyRecord]:
        return self.ledger.query(employee_id=employee_id, status=status)

    def resolve_anomaly(self, anomaly_id: str, resolution: AnomalyStatus, resolved_by: str) -> AnomalyRecord:
        """Resolución manual (confirmed | review_dismissed).

        Solo ``confirmed`` afecta a la reputación del empleado.
        """

        resolution = AnomalyStatus(resolution)
        if resolution not in RESOLUTION_STATUSES:
            raise ValueError(f"invalid resolution '{resolution.value}'")

        record = self.ledger.mark_resolved(anomaly_id, resolution, resolved_by, self._clock())
        if resolution == AnomalyStatus.CONFIRMED:
            self.reputation.confirm(record.employee_id)

        logger.info(
            "anomaly_resolved id=%s employee=%s resolution=%s by=%s",
            anomaly_id,
            record.employee_id,
            resolution.value,
            resolved_by,
        )
        return record

    def attach_remediation_reference(self, anomaly_id: str, reference: str) -> AnomalyRecord:
        """Guarda la referencia externa (p.ej. tx hash) del rebalanceo ya ejecutado."""
        return self.ledger.set_rebalance_reference(anomaly_id, reference)

    def get_summary(self) -> AnomalySummary:
        records = self.ledger.all()
        by_severity = {s.value: 0 for s in AnomalySeverity}
        employee_ids = []
        for r in records:
            by_severity[r.severity.value] += 1
            if r.employee_id not in employee_ids:
                employee_ids.append(r.employee_id)

        if employee_ids:
            total = sum(self.reputation.get_reputation(eid).score for eid in employee_ids)
            avg_reputation = _round_half_up(total / len(employee_ids))
        else:
            avg_reputation = NO_FLAGGED_AVG_REPUTATION

        recent = sorted(records, key=lambda r: r.detected_at, reverse=True)[:RECENT_ANOMALIES_LIMIT]

        return AnomalySummary(
            total_anomalies=len(records),
            pending_review=sum(1 for r in records if r.status == AnomalyStatus.PENDING_REVIEW),
            rebalances_triggered=sum(1 for r in records if r.status == AnomalyStatus.REBALANCE_TRIGGERED),
            avg_reputation_score=avg_reputation,
            by_severity=by_severity,
            recent_anomalies=recent,
        )

    def get_reputations(self, employee_ids: Iterable[str]) -> List[ReputationRecord]:
        return self.reputation.get_reputations(employee_ids)
