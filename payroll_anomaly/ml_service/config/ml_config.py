from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AnomalyConfig:
    """Configuración de Isolation Forest y del umbral de detección."""

    n_estimators: int = 100
    max_samples: int = 256
    # Score >= umbral se considera anómalo
    score_threshold: float = 0.55
    # Hora de inicio por defecto si el empleado no tiene horario
    fallback_start_hour: float = 9.0

    # Cortes de severidad sobre el score crudo (sin redondear)
    critical_score: float = 0.85
    high_score: float = 0.75
    medium_score: float = 0.65

    @classmethod
    def from_env(cls) -> "AnomalyConfig":
        return cls(
            n_estimators=int(os.getenv("ANOMALY_N_ESTIMATORS", "100")),
            max_samples=int(os.getenv("ANOMALY_MAX_SAMPLES", "256")),
            score_threshold=float(os.getenv("ANOMALY_SCORE_THRESHOLD", "0.55")),
            fallback_start_hour=float(os.getenv("ANOMALY_FALLBACK_START_HOUR", "9")),
        )


@dataclass(frozen=True)
class ReputationConfig:
    """Parámetros de reputación por empleado (escala 0-100)."""

    default_score: int = 75
    penalty_per_anomaly: int = 8
    recovery_per_clean_scan: int = 2
    min_score: int = 0
    max_score: int = 100

    # Por debajo de este valor la anomalía dispara rebalanceo automático
    low_threshold: int = 40
    # No se consulta en decide_action; ver DESIGN.md
    high_threshold: int = 60

    @classmethod
    def from_env(cls) -> "ReputationConfig":
        return cls(
            default_score=int(os.getenv("REPUTATION_DEFAULT_SCORE", "75")),
            penalty_per_anomaly=int(os.getenv("REPUTATION_PENALTY", "8")),
            recovery_per_clean_scan=int(os.getenv("REPUTATION_RECOVERY", "2")),
            low_threshold=int(os.getenv("REPUTATION_LOW_THRESHOLD", "40")),
            high_threshold=int(os.getenv("REPUTATION_HIGH_THRESHOLD", "60")),
        )


@dataclass(frozen=True)
class GlobalMLConfig:
    anomaly: AnomalyConfig = field(default_factory=AnomalyConfig)
    reputation: ReputationConfig = field(default_factory=ReputationConfig)

    @classmethod
    def from_env(cls) -> "GlobalMLConfig":
        return cls(anomaly=AnomalyConfig.from_env(), reputation=ReputationConfig.from_env())


# Config global por defecto utilizable en runners/servicios
DEFAULT_ML_CONFIG = GlobalMLConfig()
