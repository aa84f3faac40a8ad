from .isolation_forest import Detection, PayrollIsolationForest, UnfittedModelError
from .isolation_tree import EULER_GAMMA, average_path_length

__all__ = [
    "Detection",
    "PayrollIsolationForest",
    "UnfittedModelError",
    "EULER_GAMMA",
    "average_path_length",
]
