"""Extracción de features por fichaje.

Dos formas de datos separadas:
- ``TimecardFeatures``: las 9 features que entran al modelo, en orden fijo
  (los árboles indexan por posición).
- ``EntryObservation``: features + contexto para explicar la anomalía
  (flag de fin de semana, fichaje, empleado). El flag de fin de semana NO
  forma parte del vector puntuado.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from payroll_anomaly.common.dates import (
    clock_to_fractional_hour,
    current_semimonthly_period,
    day_of_week,
    days_between,
    hours_between,
    is_weekend,
)
from payroll_anomaly.ml_service.config.ml_config import AnomalyConfig
from payroll_anomaly.ml_service.models.timecard import (
    EmployeeRecord,
    PayRunRecord,
    PayRunStatus,
    ScheduleRecord,
    TimeEntryRecord,
)

logger = logging.getLogger(__name__)

OCCUPATION_CODES: Mapping[str, int] = {"yearly": 0, "daily": 1, "hourly": 2}
DEFAULT_OCCUPATION_CODE = 1

FEATURE_NAMES: Tuple[str, ...] = (
    "clock_in_hour",
    "clock_out_hour",
    "duration_hours",
    "days_since_pay_day",
    "days_until_pay_day",
    "occupation_type",
    "rate_cents",
    "day_of_week",
    "schedule_deviation",
)


def occupation_type_from_pay_type(pay_type: str) -> int:
    return OCCUPATION_CODES.get(pay_type, DEFAULT_OCCUPATION_CODE)


@dataclass(frozen=True)
class TimecardFeatures:
    clock_in_hour: float
    clock_out_hour: float
    duration_hours: float
    days_since_pay_day: int
    days_until_pay_day: int
    occupation_type: int
    rate_cents: int
    day_of_week: int
    # Horas de diferencia respecto al inicio del horario (positivo = tarde)
    schedule_deviation: float

    def to_vector(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in FEATURE_NAMES], dtype=np.float64)


@dataclass(frozen=True)
class EntryObservation:
    features: TimecardFeatures
    is_weekend: bool
    entry: TimeEntryRecord
    employee: EmployeeRecord
    scheduled_start_hour: float

    def snapshot(self) -> Dict[str, float]:
        data = asdict(self.features)
        data["is_weekend"] = self.is_weekend
        return data


@dataclass(frozen=True)
class PayDayContext:
    last_pay_date: date
    next_pay_date: date


def build_pay_day_context(pay_runs: Iterable[PayRunRecord], today: date) -> PayDayContext:
    """Último fin de periodo ejecutado (o hoy) y fin del periodo quincenal actual."""

    executed = [pr.period_end for pr in pay_runs if pr.status == PayRunStatus.EXECUTED]
    last_pay_date = max(executed) if executed else today
    _, next_pay_date = current_semimonthly_period(today)
    return PayDayContext(last_pay_date=last_pay_date, next_pay_date=next_pay_date)


def scheduled_start_hour(
    employee: EmployeeRecord,
    schedules: Mapping[str, ScheduleRecord],
    fallback: float,
) -> float:
    schedule = schedules.get(employee.schedule_id or "")
    if schedule is None or not schedule.start_time:
        return fallback
    return clock_to_fractional_hour(schedule.start_time)


def extract_observation(
    entry: TimeEntryRecord,
    employee: EmployeeRecord,
    start_hour: float,
    ctx: PayDayContext,
) -> Optional[EntryObservation]:
    """Construye la observación de un fichaje cerrado; None si está abierto."""

    if not entry.clock_out:
        return None

    clock_in_hour = clock_to_fractional_hour(entry.clock_in)
    features = TimecardFeatures(
        clock_in_hour=clock_in_hour,
        clock_out_hour=clock_to_fractional_hour(entry.clock_out),
        duration_hours=hours_between(entry.clock_in, entry.clock_out),
        days_since_pay_day=max(0, days_between(ctx.last_pay_date, entry.date)),
        days_until_pay_day=max(0, days_between(entry.date, ctx.next_pay_date)),
        occupation_type=occupation_type_from_pay_type(employee.pay_type),
        rate_cents=employee.rate_cents,
        day_of_week=day_of_week(entry.date),
        schedule_deviation=clock_in_hour - start_hour,
    )
    return EntryObservation(
        features=features,
        is_weekend=is_weekend(entry.date),
        entry=entry,
        employee=employee,
        scheduled_start_hour=start_hour,
    )


class FeatureExtractor:
    """Convierte el lote de fichajes en observaciones listas para el modelo."""

    def __init__(self, cfg: AnomalyConfig) -> None:
        self.cfg = cfg

    def extract(
        self,
        employees: Iterable[EmployeeRecord],
        time_entries: Iterable[TimeEntryRecord],
        pay_runs: Iterable[PayRunRecord],
        schedules: Iterable[ScheduleRecord],
        today: date,
    ) -> List[EntryObservation]:
        employee_map = {e.id: e for e in employees}
        schedule_map = {s.id: s for s in schedules}
        ctx = build_pay_day_context(pay_runs, today)

        observations: List[EntryObservation] = []
        skipped = 0
        for entry in time_entries:
            employee = employee_map.get(entry.employee_id)
            if employee is None:
                skipped += 1
                continue

            start_hour = scheduled_start_hour(employee, schedule_map, self.cfg.fallback_start_hour)
            obs = extract_observation(entry, employee, start_hour, ctx)
            if obs is None:
                skipped += 1
                continue
            observations.append(obs)

        logger.debug(
            "feature_extract observations=%d skipped=%d last_pay=%s next_pay=%s",
            len(observations),
            skipped,
            ctx.last_pay_date,
            ctx.next_pay_date,
        )
        return observations


def to_matrix(observations: List[EntryObservation]) -> np.ndarray:
    return np.vstack([obs.features.to_vector() for obs in observations])
