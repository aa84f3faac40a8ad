from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union


class AnomalySeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AnomalyStatus(str, Enum):
    DETECTED = "detected"
    PENDING_REVIEW = "pending_review"
    REBALANCE_TRIGGERED = "rebalance_triggered"
    REVIEW_DISMISSED = "review_dismissed"
    CONFIRMED = "confirmed"


class AnomalyAction(str, Enum):
    # Remediación automática de tesorería
    USYC_REBALANCE = "usyc_rebalance"
    # Revisión manual
    CEO_MANUAL_REVIEW = "ceo_manual_review"


RESOLUTION_STATUSES = (AnomalyStatus.CONFIRMED, AnomalyStatus.REVIEW_DISMISSED)

FeatureValue = Union[float, int, bool]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class AnomalyRecord:
    """Fichaje marcado como anómalo.

    Solo ``status``, ``resolved_*`` y ``rebalance_tx_hash`` cambian después de
    la detección. ``reputation_score`` es la foto en el momento de detectar.
    """

    id: str
    employee_id: str
    employee_name: str
    company_id: str
    detected_at: datetime
    severity: AnomalySeverity
    status: AnomalyStatus
    action: AnomalyAction
    anomaly_score: float
    reputation_score: int
    features: Dict[str, FeatureValue]
    reasons: List[str] = field(default_factory=list)
    time_entry_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    rebalance_tx_hash: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "company_id": self.company_id,
            "detected_at": _iso(self.detected_at),
            "severity": self.severity.value,
            "status": self.status.value,
            "action": self.action.value,
            "anomaly_score": self.anomaly_score,
            "reputation_score": self.reputation_score,
            "features": dict(self.features),
            "reasons": list(self.reasons),
            "time_entry_id": self.time_entry_id,
            "resolved_at": _iso(self.resolved_at),
            "resolved_by": self.resolved_by,
            "rebalance_tx_hash": self.rebalance_tx_hash,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnomalyRecord":
        return cls(
            id=data["id"],
            employee_id=data["employee_id"],
            employee_name=data.get("employee_name", ""),
            company_id=data.get("company_id", ""),
            detected_at=datetime.fromisoformat(data["detected_at"]),
            severity=AnomalySeverity(data["severity"]),
            status=AnomalyStatus(data["status"]),
            action=AnomalyAction(data["action"]),
            anomaly_score=float(data["anomaly_score"]),
            reputation_score=int(data["reputation_score"]),
            features=dict(data.get("features") or {}),
            reasons=list(data.get("reasons") or []),
            time_entry_id=data.get("time_entry_id"),
            resolved_at=_parse_iso(data.get("resolved_at")),
            resolved_by=data.get("resolved_by"),
            rebalance_tx_hash=data.get("rebalance_tx_hash"),
        )


@dataclass
class ReputationRecord:
    employee_id: str
    score: int
    last_updated: datetime
    anomaly_count: int = 0
    confirmed_anomaly_count: int = 0

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "score": self.score,
            "last_updated": _iso(self.last_updated),
            "anomaly_count": self.anomaly_count,
            "confirmed_anomaly_count": self.confirmed_anomaly_count,
        }


@dataclass(frozen=True)
class ScanResult:
    anomalies: List[AnomalyRecord]
    scanned_entries: int
    total_anomalies: int
    rebalance_triggered: int
    review_triggered: int

    @classmethod
    def empty(cls) -> "ScanResult":
        return cls(anomalies=[], scanned_entries=0, total_anomalies=0, rebalance_triggered=0, review_triggered=0)

    def to_dict(self) -> dict:
        return {
            "anomalies": [a.to_dict() for a in self.anomalies],
            "scanned_entries": self.scanned_entries,
            "total_anomalies": self.total_anomalies,
            "rebalance_triggered": self.rebalance_triggered,
            "review_triggered": self.review_triggered,
        }


@dataclass(frozen=True)
class AnomalySummary:
    total_anomalies: int
    pending_review: int
    rebalances_triggered: int
    # Media de reputación actual sobre empleados con alguna anomalía
    avg_reputation_score: int
    by_severity: Dict[str, int]
    recent_anomalies: List[AnomalyRecord]

    def to_dict(self) -> dict:
        return {
            "total_anomalies": self.total_anomalies,
            "pending_review": self.pending_review,
            "rebalances_triggered": self.rebalances_triggered,
            "avg_reputation_score": self.avg_reputation_score,
            "by_severity": dict(self.by_severity),
            "recent_anomalies": [a.to_dict() for a in self.recent_anomalies],
        }
