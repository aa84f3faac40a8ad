from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.exceptions import NotFittedError
from sklearn.utils import check_array, check_random_state
from sklearn.utils.random import sample_without_replacement

from .isolation_tree import TreeNode, average_path_length, build_tree, path_length

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5


class UnfittedModelError(NotFittedError):
    """Se intentó puntuar antes de llamar a ``fit``."""

    def __init__(self) -> None:
        super().__init__("IsolationForest has not been fitted. Call fit() first.")


@dataclass(frozen=True)
class Detection:
    index: int
    score: float


class PayrollIsolationForest(BaseEstimator):
    """Isolation Forest propio con la fórmula de score clásica.

    A diferencia de ``sklearn.ensemble.IsolationForest`` el score devuelto es
    directamente ``2^(-E[h(x)] / c(psi))`` en (0, 1]: ~1 muy anómalo, ~0.5
    normal. Se reentrena en cada scan sobre el mismo lote que se puntúa.

    Parameters
    ----------
    n_estimators: int
        Número de árboles.
    max_samples: int
        Tamaño máximo de la submuestra por árbol; se usa ``min(max_samples, n)``.
    random_state: None | int | np.random.RandomState
        Fuente de aleatoriedad inyectable. ``None`` = no determinista.
    """

    def __init__(self, n_estimators: int = 100, max_samples: int = 256, random_state=None) -> None:
        self.n_estimators = n_estimators
        self.max_samples = max_samples
        self.random_state = random_state

    def fit(self, X, y=None) -> "PayrollIsolationForest":
        X = check_array(X, dtype=np.float64)
        rng = check_random_state(self.random_state)

        n_rows = X.shape[0]
        self.sample_size_ = min(self.max_samples, n_rows)
        self.max_depth_ = int(math.ceil(math.log2(self.sample_size_)))
        self.n_features_in_ = X.shape[1]

        trees: List[TreeNode] = []
        for _ in range(self.n_estimators):
            idx = sample_without_replacement(n_rows, self.sample_size_, random_state=rng)
            trees.append(build_tree(X[idx], 0, self.max_depth_, rng))
        self.trees_ = trees

        logger.debug(
            "iforest_fit rows=%d sample_size=%d max_depth=%d trees=%d",
            n_rows,
            self.sample_size_,
            self.max_depth_,
            len(trees),
        )
        return self

    def _check_fitted(self) -> None:
        if not getattr(self, "trees_", None):
            raise UnfittedModelError()

    def score(self, vector) -> float:
        """Score de anomalía de una observación, en (0, 1]."""

        self._check_fitted()
        point = np.asarray(vector, dtype=np.float64).ravel()
        if point.shape[0] != self.n_features_in_:
            raise ValueError(
                f"expected {self.n_features_in_} features, got {point.shape[0]}"
            )

        total = 0.0
        for tree in self.trees_:
            total += path_length(point, tree)
        avg_path = total / len(self.trees_)

        c = average_path_length(self.sample_size_)
        if c == 0:
            return NEUTRAL_SCORE
        return float(2.0 ** (-(avg_path / c)))

    def score_samples(self, X) -> np.ndarray:
        self._check_fitted()
        X = check_array(X, dtype=np.float64)
        return np.array([self.score(row) for row in X], dtype=np.float64)

    def detect(self, X, threshold: float) -> List[Detection]:
        """Observaciones con score >= threshold, con su índice original."""

        scores = self.score_samples(X)
        return [
            Detection(index=i, score=float(s))
            for i, s in enumerate(scores)
            if s >= threshold
        ]
