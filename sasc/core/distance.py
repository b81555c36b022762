"""
Euclidean distance between frequency vectors.

The full N x N matrix is symmetric with a zero diagonal, so only the
pairs above the diagonal are computed; each result is written to both
(i, j) and (j, i).
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy.spatial.distance import pdist, squareform

from .features import SourceFile, VECTOR_SIZE
from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DistanceEntry:
    """Distance from one file to the file at ``index``."""
    index: int
    path: str
    distance: float


def pairwise_distance(vec_a: np.ndarray, vec_b: np.ndarray) -> float:
    """
    Euclidean distance between two frequency vectors.

    sqrt(sum((a[i] - b[i])^2)) over the 256 byte values.
    """
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.shape != (VECTOR_SIZE,) or b.shape != (VECTOR_SIZE,):
        raise ValueError(
            f"frequency vectors must have shape ({VECTOR_SIZE},), got {a.shape} and {b.shape}"
        )
    diff = a - b
    return math.sqrt(float(np.dot(diff, diff)))


class DistanceMatrix:
    """
    Distances between every pair of files of one run.

    Files keep their discovery order; row i of the matrix belongs to
    ``files[i]``. Consumers that need a "nearest first" view get a fresh
    sorted list, the stored rows are never reordered.
    """

    def __init__(self, files: Sequence[SourceFile], distances: np.ndarray):
        n = len(files)
        if distances.shape != (n, n):
            raise ValueError(f"distance array must be {n}x{n}, got {distances.shape}")
        self._files = list(files)
        self._distances = distances
        self._distances.setflags(write=False)
        self._index: Dict[str, int] = {f.path: i for i, f in enumerate(self._files)}

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"DistanceMatrix(files={len(self)})"

    @property
    def files(self) -> List[SourceFile]:
        return list(self._files)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self._files]

    def index_of(self, path: str) -> int:
        """Position of ``path`` in discovery order."""
        try:
            return self._index[path]
        except KeyError:
            raise KeyError(f"File not in matrix: {path}") from None

    def distance(self, i: int, j: int) -> float:
        return float(self._distances[i, j])

    def as_array(self) -> np.ndarray:
        """Read-only view of the N x N distances."""
        return self._distances

    def entries(self, i: int) -> List[DistanceEntry]:
        """All distances from file ``i``, self included, in discovery order."""
        row = self._distances[i]
        return [
            DistanceEntry(index=j, path=f.path, distance=float(row[j]))
            for j, f in enumerate(self._files)
        ]

    def within(self, i: int, threshold: float) -> List[DistanceEntry]:
        """Entries of file ``i`` at distance <= threshold, discovery order, self included."""
        return [e for e in self.entries(i) if e.distance <= threshold]

    def nearest(self, i: int, threshold: Optional[float] = None) -> List[DistanceEntry]:
        """
        Neighbours of file ``i`` sorted by ascending distance.

        The file itself is excluded. Ties keep discovery order. With a
        threshold only entries at distance <= threshold are returned.
        """
        neighbours = [
            e for e in self.entries(i)
            if e.index != i and (threshold is None or e.distance <= threshold)
        ]
        return sorted(neighbours, key=lambda e: e.distance)


def build_matrix(files: Sequence[SourceFile]) -> DistanceMatrix:
    """
    Compute the distance between every pair of files.

    Each unordered pair is evaluated once (condensed upper triangle) and
    mirrored; the diagonal is zero without being computed.

    Args:
        files: Source files in discovery order

    Returns:
        Complete DistanceMatrix
    """
    n = len(files)
    logger.info(f"Computing {n * (n - 1) // 2} pairwise distances for {n} files")

    if n < 2:
        return DistanceMatrix(files, np.zeros((n, n), dtype=np.float64))

    vectors = np.vstack([f.vector for f in files]).astype(np.float64)
    condensed = pdist(vectors, metric='euclidean')
    distances = squareform(condensed, checks=False)
    return DistanceMatrix(files, np.ascontiguousarray(distances, dtype=np.float64))
