"""
Thread-safe cache of raw (pre-scale) partition weights.

One coarse lock guards the whole map. The lock is held only for the dict
operation itself, never across a weight computation, so two threads may
compute and store the same value for a partition. The weights are pure
functions of their inputs, so the duplicate writes are identical.
"""

from threading import Lock
from typing import Dict, Optional


class WeightCache:
    """Partition id -> raw weight, safe for concurrent get/set/clear."""

    def __init__(self):
        self._lock = Lock()
        self._weights: Dict[int, float] = {}
        self._generation: Optional[int] = None

    def get(self, partition_id: int) -> Optional[float]:
        with self._lock:
            return self._weights.get(partition_id)

    def set(self, partition_id: int, weight: float) -> None:
        with self._lock:
            self._weights[partition_id] = float(weight)

    def clear(self, generation: Optional[int] = None) -> None:
        """Drop every entry.

        Args:
            generation: Partition-map generation the emptied cache now
                belongs to. Left unchanged when None.
        """
        with self._lock:
            self._weights.clear()
            if generation is not None:
                self._generation = generation

    @property
    def generation(self) -> Optional[int]:
        with self._lock:
            return self._generation

    def snapshot(self) -> Dict[int, float]:
        """Copy of the current entries."""
        with self._lock:
            return dict(self._weights)

    def __len__(self) -> int:
        with self._lock:
            return len(self._weights)
