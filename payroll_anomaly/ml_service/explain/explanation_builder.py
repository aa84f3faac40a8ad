from __future__ import annotations

from typing import List

from payroll_anomaly.ml_service.config.ml_config import AnomalyConfig
from payroll_anomaly.ml_service.features.feature_extractor import EntryObservation
from payroll_anomaly.ml_service.models.anomaly_model import AnomalySeverity


def severity_from_score(score: float, cfg: AnomalyConfig) -> AnomalySeverity:
    if score >= cfg.critical_score:
        return AnomalySeverity.CRITICAL
    if score >= cfg.high_score:
        return AnomalySeverity.HIGH
    if score >= cfg.medium_score:
        return AnomalySeverity.MEDIUM
    return AnomalySeverity.LOW


def _format_clock(hour: float) -> str:
    minutes = int(round((hour % 1) * 60))
    return f"{int(hour)}:{minutes:02d}"


def build_reasons(obs: EntryObservation, score: float) -> List[str]:
    """Motivos legibles de la anomalía.

    Se evalúan todas las reglas en orden; si ninguna aplica se devuelve un
    motivo genérico con el score del modelo.
    """

    f = obs.features
    reasons: List[str] = []

    # Duración
    if f.duration_hours > 12:
        reasons.append(f"Unusually long shift: {f.duration_hours:.1f}h")
    if 0 < f.duration_hours < 1:
        reasons.append(f"Suspiciously short shift: {f.duration_hours:.1f}h")

    # Hora del día
    if f.clock_in_hour < 5 or f.clock_in_hour > 22:
        reasons.append(f"Unusual clock-in time: {_format_clock(f.clock_in_hour)}")

    if obs.is_weekend:
        reasons.append("Entry logged on a weekend")

    # Cercanía al día de pago
    if f.days_since_pay_day <= 1:
        reasons.append(f"Entry very close to pay day ({f.days_since_pay_day}d after)")
    if f.days_until_pay_day <= 1:
        reasons.append(f"Entry very close to upcoming pay day ({f.days_until_pay_day}d before)")

    # Desvío respecto al horario
    if abs(f.schedule_deviation) > 2:
        direction = "Late" if f.schedule_deviation > 0 else "Early"
        reasons.append(f"{direction} by {abs(f.schedule_deviation):.1f}h vs schedule")

    if not reasons:
        reasons.append(f"Statistical outlier, score={score:.3f}")

    return reasons
