"""Árbol de aislamiento (isolation tree).

Cada árbol particiona recursivamente una submuestra eligiendo una feature al
azar y un punto de corte uniforme entre su mínimo y máximo. Los puntos
anómalos quedan aislados con menos cortes (caminos más cortos).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

# Constante de Euler-Mascheroni truncada a 10 decimales
EULER_GAMMA = 0.5772156649


@dataclass(frozen=True)
class ExternalNode:
    """Hoja: guarda el tamaño del subconjunto que llegó hasta aquí."""

    size: int


@dataclass(frozen=True)
class InternalNode:
    feature_index: int
    split_value: float
    left: "TreeNode"
    right: "TreeNode"


TreeNode = Union[ExternalNode, InternalNode]


def average_path_length(n: int) -> float:
    """c(n): longitud media esperada de un camino sin éxito en un BST de n nodos."""

    if n <= 1:
        return 0.0
    if n == 2:
        return 1.0
    return 2.0 * (math.log(n - 1) + EULER_GAMMA) - 2.0 * (n - 1) / n


def build_tree(data: np.ndarray, depth: int, max_depth: int, rng: np.random.RandomState) -> TreeNode:
    n_rows = data.shape[0]
    if depth >= max_depth or n_rows <= 1:
        return ExternalNode(size=n_rows)

    feature_index = int(rng.randint(data.shape[1]))
    column = data[:, feature_index]
    lo = float(column.min())
    hi = float(column.max())

    if lo == hi:
        return ExternalNode(size=n_rows)

    split_value = float(rng.uniform(lo, hi))
    mask = column < split_value

    return InternalNode(
        feature_index=feature_index,
        split_value=split_value,
        left=build_tree(data[mask], depth + 1, max_depth, rng),
        right=build_tree(data[~mask], depth + 1, max_depth, rng),
    )


def path_length(point: np.ndarray, node: TreeNode) -> float:
    depth = 0
    while isinstance(node, InternalNode):
        node = node.left if point[node.feature_index] < node.split_value else node.right
        depth += 1
    return depth + average_path_length(node.size)


def tree_depth(node: TreeNode) -> int:
    if isinstance(node, ExternalNode):
        return 0
    return 1 + max(tree_depth(node.left), tree_depth(node.right))
