from .anomaly_agent import AnomalyDetectionAgent
from .repository.anomaly_repository import AnomalyNotFoundError

__all__ = ["AnomalyDetectionAgent", "AnomalyNotFoundError"]
