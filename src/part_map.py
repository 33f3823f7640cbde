"""
Per-partition geometric summaries for part-based falloffs.

A partition is a caller-assigned integer grouping of points, typically one
mesh island. PartitionMap reduces a point set to one bounding-box summary
per partition (centre + extent axis) and tracks the bounds of all partition
centres, which are used to seed default falloff control points.

The map is rebuilt wholesale on topology change and is read-only between
builds. Building while other threads are querying is not supported.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import trimesh

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PartitionSummary:
    """Bounding-box summary of all points carrying one partition id."""
    center: np.ndarray   # (3,) bounding-box centre
    axis: np.ndarray     # (3,) bounding-box extent (max - min)


class PartitionMap:
    """Partition id -> PartitionSummary, plus bounds of all partition centres."""

    def __init__(self):
        self._summaries: Dict[int, PartitionSummary] = {}
        self._min = np.zeros(3)
        self._max = np.zeros(3)
        self._generation = 0

    def build(self, points: Iterable[Tuple[int, Iterable[float]]]) -> None:
        """Rebuild from ``(partition_id, position)`` pairs.

        Replaces all prior contents, including the partition bounds.
        """
        ids: List[int] = []
        positions: List[Iterable[float]] = []
        for part, pos in points:
            ids.append(int(part))
            positions.append(pos)
        self.build_from_arrays(np.asarray(ids, dtype=np.int64), positions)

    def build_from_arrays(self, partition_ids, positions) -> None:
        """Rebuild from a (N,) id array and a (N, 3) position array."""
        ids = np.asarray(partition_ids, dtype=np.int64).reshape(-1)
        pts = np.asarray(positions, dtype=float)
        if pts.size == 0:
            pts = pts.reshape(0, 3)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError(f"Positions must have shape (N, 3), got {pts.shape}")
        if len(ids) != len(pts):
            raise ValueError(
                f"Got {len(ids)} partition ids for {len(pts)} positions"
            )
        if len(ids) and int(ids.min()) < 0:
            raise ValueError("Partition ids must be non-negative")
        if not np.isfinite(pts).all():
            raise ValueError("Positions must be finite (no inf or NaN)")

        summaries: Dict[int, PartitionSummary] = {}
        bounds_min = np.zeros(3)
        bounds_max = np.zeros(3)

        if len(ids):
            unique_ids, inverse = np.unique(ids, return_inverse=True)
            inverse = inverse.reshape(-1)
            mins = np.full((len(unique_ids), 3), np.inf)
            maxs = np.full((len(unique_ids), 3), -np.inf)
            np.minimum.at(mins, inverse, pts)
            np.maximum.at(maxs, inverse, pts)

            centers = (mins + maxs) / 2.0
            axes = maxs - mins
            for part, center, axis in zip(unique_ids, centers, axes):
                summaries[int(part)] = PartitionSummary(
                    center=_frozen(center), axis=_frozen(axis),
                )
            bounds_min = centers.min(axis=0)
            bounds_max = centers.max(axis=0)

        self._summaries = summaries
        self._min = _frozen(bounds_min)
        self._max = _frozen(bounds_max)
        self._generation += 1

        logger.debug(
            "Built partition map: %d points, %d partitions, bounds %s -> %s",
            len(ids), len(summaries), self._min.tolist(), self._max.tolist(),
        )

    def get(self, partition_id: int) -> Optional[PartitionSummary]:
        return self._summaries.get(partition_id)

    def empty(self) -> bool:
        return not self._summaries

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Componentwise (min, max) over all partition centres."""
        return self._min, self._max

    @property
    def generation(self) -> int:
        """Number of builds so far; 0 for a map that was never built."""
        return self._generation

    def partition_ids(self) -> List[int]:
        return sorted(self._summaries)

    def __len__(self) -> int:
        return len(self._summaries)

    def __contains__(self, partition_id) -> bool:
        return partition_id in self._summaries


def mesh_partition_ids(mesh: trimesh.Trimesh) -> np.ndarray:
    """Label each vertex of *mesh* with the index of its connected island.

    Vertices referenced by no edge form islands of their own.
    """
    n_vertices = len(mesh.vertices)
    if n_vertices == 0:
        return np.zeros(0, dtype=np.int64)
    if len(mesh.faces) == 0:
        return np.arange(n_vertices, dtype=np.int64)
    labels = trimesh.graph.connected_component_labels(
        mesh.edges_unique, node_count=n_vertices,
    )
    return np.asarray(labels, dtype=np.int64)


def _frozen(vec) -> np.ndarray:
    out = np.array(vec, dtype=float)
    out.flags.writeable = False
    return out
