"""
Per-partition falloff weight evaluation.

``weight_for`` returns the post-scale weight of one partition, computing
and caching the raw (pre-scale) value on first access. Every input maps
to a defined weight:

- empty partition map         -> 1.0 * scale, cache untouched
- partition id not in the map -> raw 1.0 (cached)
- zero-length positional axis -> raw 1.0 (cached)
"""

from typing import Optional

import numpy as np

from coherent_noise import NoiseConfig, fractal_noise
from falloff_settings import FalloffSettings, PositionalStrategy, RandomStrategy
from part_map import PartitionMap, PartitionSummary
from weight_cache import WeightCache

DEFAULT_WEIGHT = 1.0


def remap_linear(t: float) -> float:
    """Linear ease: clamp to [0, 1], no smoothing."""
    return float(min(1.0, max(0.0, t)))


def positional_weight(center, strategy: PositionalStrategy) -> float:
    """Clamped fraction of *center*'s projection along min_pos -> max_pos."""
    start = np.asarray(strategy.min_pos, dtype=float)
    segment = np.asarray(strategy.max_pos, dtype=float) - start
    den = float(segment @ segment)
    if den == 0.0:
        return DEFAULT_WEIGHT
    num = float((np.asarray(center, dtype=float) - start) @ segment)
    return remap_linear(num / den)


def raw_weight(
    summary: PartitionSummary,
    settings: FalloffSettings,
    noise_config: Optional[NoiseConfig] = None,
) -> float:
    """Pre-scale weight of one partition under the settings' strategy."""
    strategy = settings.strategy
    if isinstance(strategy, RandomStrategy):
        return fractal_noise(summary.center, strategy.seed, noise_config)
    if isinstance(strategy, PositionalStrategy):
        return positional_weight(summary.center, strategy)
    raise TypeError(f"Unsupported falloff strategy: {type(strategy).__name__}")


def weight_for(
    partition_id: int,
    settings: FalloffSettings,
    part_map: PartitionMap,
    cache: WeightCache,
    noise_config: Optional[NoiseConfig] = None,
) -> float:
    """Post-scale weight of *partition_id*.

    The cache lock is taken separately for the lookup and the store, so
    concurrent first queries for one partition may both compute it.
    """
    if part_map.empty():
        return settings.scale * DEFAULT_WEIGHT

    cached = cache.get(partition_id)
    if cached is not None:
        return settings.scale * cached

    summary = part_map.get(partition_id)
    if summary is None:
        raw = DEFAULT_WEIGHT
    else:
        raw = raw_weight(summary, settings, noise_config)

    cache.set(partition_id, raw)
    return settings.scale * raw
