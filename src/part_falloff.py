"""
Part falloff: one weight per mesh island.

PartFalloff ties together the partition map, the weight cache and the
settings tracker. Lifecycle, driven from a single control thread:

1. ``setup_mesh`` / ``setup_points`` on topology change (rebuilds the map,
   clears the cache).
2. ``update(settings)`` once per evaluation pass (clears the cache only if
   the scale-blind settings changed).
3. Any number of ``weight_for`` / ``weight_for_point`` calls, from any
   number of threads.

Steps 1 and 2 must not overlap with step 3.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import trimesh

from coherent_noise import NoiseConfig
from falloff_evaluator import DEFAULT_WEIGHT, weight_for
from falloff_settings import FalloffMode, FalloffSettings, SettingsTracker
from part_map import PartitionMap, mesh_partition_ids
from weight_cache import WeightCache

logger = logging.getLogger(__name__)


class PartFalloff:
    """Applies the same falloff weight to every point of a partition."""

    def __init__(self, noise_config: Optional[NoiseConfig] = None):
        self.noise_config = noise_config or NoiseConfig()
        self.part_map = PartitionMap()
        self.cache = WeightCache()
        self.tracker = SettingsTracker(self.cache)
        self._mesh: Optional[trimesh.Trimesh] = None
        self._point_partitions = np.zeros(0, dtype=np.int64)

    # ─── Topology ────────────────────────────────────────────────────────

    def setup_mesh(self, mesh: trimesh.Trimesh, force: bool = False) -> bool:
        """Partition *mesh* by island. Returns False if it was already set up."""
        if mesh is self._mesh and not force:
            return False
        labels = mesh_partition_ids(mesh)
        self._rebuild(labels, np.asarray(mesh.vertices, dtype=float))
        self._mesh = mesh
        logger.info(
            "Set up part falloff for mesh: %d vertices, %d islands",
            len(labels), len(self.part_map),
        )
        return True

    def setup_points(self, points: Iterable[Tuple[int, Iterable[float]]]) -> None:
        """Rebuild from ``(partition_id, position)`` pairs, in point order."""
        ids = []
        positions = []
        for part, pos in points:
            ids.append(int(part))
            positions.append(pos)
        self._rebuild(np.asarray(ids, dtype=np.int64), positions)
        self._mesh = None

    def _rebuild(self, partition_ids: np.ndarray, positions) -> None:
        self.part_map.build_from_arrays(partition_ids, positions)
        self._point_partitions = np.array(partition_ids, dtype=np.int64)
        self.cache.clear(generation=self.part_map.generation)

    @property
    def point_count(self) -> int:
        return len(self._point_partitions)

    def partition_of_point(self, point_index: int) -> Optional[int]:
        if point_index is None or not 0 <= point_index < len(self._point_partitions):
            return None
        return int(self._point_partitions[point_index])

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.part_map.bounds()

    # ─── Settings ────────────────────────────────────────────────────────

    def default_settings(
        self,
        mode: Union[FalloffMode, int, str] = FalloffMode.POSITION,
        seed: int = 0,
    ) -> FalloffSettings:
        """Control points on the partition bounds, scale 1.0."""
        return FalloffSettings.from_bounds(
            self.part_map.bounds(), mode=mode, seed=seed, scale=1.0,
        )

    def update(self, settings: FalloffSettings) -> bool:
        """Apply settings for the next pass. Returns True if the cache was cleared."""
        return self.tracker.apply(settings)

    @property
    def settings(self) -> FalloffSettings:
        """Last applied settings, or the bounds defaults before any ``update``.

        Read-only: the defaults are not applied to the tracker, so queries
        never clear the cache. Weights cached under the defaults are dropped
        by the first ``update``.
        """
        current = self.tracker.current
        if current is None:
            return self.default_settings()
        return current

    # ─── Queries ─────────────────────────────────────────────────────────

    def weight_for(self, partition_id: int) -> float:
        settings = self.settings
        self._check_generation()
        if (
            not self.part_map.empty()
            and partition_id not in self.part_map
            and self.cache.get(partition_id) is None
        ):
            logger.warning(
                "Partition %s not in part map (%d partitions); using default weight",
                partition_id, len(self.part_map),
            )
        return weight_for(
            partition_id, settings, self.part_map, self.cache, self.noise_config,
        )

    def weight_for_point(self, point_index: Optional[int]) -> float:
        """Weight of the partition owning a point; 1.0 for no/unknown point."""
        part = self.partition_of_point(point_index)
        if part is None or self.part_map.empty():
            return DEFAULT_WEIGHT
        return self.weight_for(part)

    def weights_for_points(self) -> np.ndarray:
        """(N,) weight for every point, in point order."""
        if len(self._point_partitions) == 0:
            return np.zeros(0, dtype=float)
        parts, inverse = np.unique(self._point_partitions, return_inverse=True)
        per_part = np.array([self.weight_for(int(p)) for p in parts], dtype=float)
        return per_part[inverse.reshape(-1)]

    def evaluate_parallel(
        self,
        partition_ids: Sequence[int],
        max_workers: Optional[int] = None,
    ) -> Dict[int, float]:
        """Query many partitions from a thread pool."""
        settings = self.settings
        ids = [int(p) for p in partition_ids]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            weights = list(executor.map(self.weight_for, ids))
        logger.debug(
            "Evaluated %d partitions in parallel (scale %.3f)", len(ids), settings.scale,
        )
        return dict(zip(ids, weights))

    def _check_generation(self) -> None:
        # Map was rebuilt behind our back (build must not overlap queries).
        generation = self.part_map.generation
        if generation and self.cache.generation != generation:
            raise RuntimeError(
                f"Partition map generation {generation} was built without "
                f"resetting the weight cache (cache generation {self.cache.generation})"
            )
