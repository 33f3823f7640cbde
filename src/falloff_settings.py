"""
Falloff settings and settings-change tracking.

FalloffSettings is the value object handed to the evaluator once per pass.
Its equality ignores ``scale``: scale is applied on top of cached raw
weights, so changing it never requires recomputation. SettingsTracker uses
that equality to decide when the weight cache must be cleared.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Union

from weight_cache import WeightCache

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


class FalloffMode(Enum):
    """How a partition's weight is derived."""
    POSITION = 0
    RANDOM = 1

    @classmethod
    def parse(cls, value: Union["FalloffMode", int, str]) -> "FalloffMode":
        """Accept a member, its integer value, or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown falloff mode: {value!r}") from None
        return cls(int(value))


@dataclass(frozen=True)
class PositionalStrategy:
    """Linear remap of a partition centre along ``min_pos -> max_pos``."""
    min_pos: Vec3
    max_pos: Vec3


@dataclass(frozen=True)
class RandomStrategy:
    """Seeded coherent noise sampled at the partition centre."""
    seed: int


@dataclass(frozen=True)
class FalloffSettings:
    """Driving parameters for one evaluation pass."""

    mode: FalloffMode = FalloffMode.POSITION
    min_pos: Vec3 = (0.0, 0.0, 0.0)
    max_pos: Vec3 = (0.0, 0.0, 0.0)
    seed: int = 0
    scale: float = field(default=1.0, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "mode", FalloffMode.parse(self.mode))
        object.__setattr__(self, "min_pos", _vec3(self.min_pos, "min_pos"))
        object.__setattr__(self, "max_pos", _vec3(self.max_pos, "max_pos"))
        object.__setattr__(self, "seed", int(self.seed))
        object.__setattr__(self, "scale", float(self.scale))

    @property
    def strategy(self) -> Union[PositionalStrategy, RandomStrategy]:
        if self.mode is FalloffMode.RANDOM:
            return RandomStrategy(seed=self.seed)
        return PositionalStrategy(min_pos=self.min_pos, max_pos=self.max_pos)

    def with_scale(self, scale: float) -> "FalloffSettings":
        return replace(self, scale=scale)

    @classmethod
    def from_bounds(
        cls,
        bounds,
        mode: Union[FalloffMode, int, str] = FalloffMode.POSITION,
        seed: int = 0,
        scale: float = 1.0,
    ) -> "FalloffSettings":
        """Place the control points on the (min, max) partition-centre bounds."""
        lo, hi = bounds
        return cls(mode=mode, min_pos=lo, max_pos=hi, seed=seed, scale=scale)


class SettingsTracker:
    """Clears a WeightCache whenever the scale-blind settings change.

    ``apply`` must complete before the queries of the pass it governs and
    must not run concurrently with them.
    """

    def __init__(self, cache: WeightCache):
        self._cache = cache
        self._settings: Optional[FalloffSettings] = None

    @property
    def current(self) -> Optional[FalloffSettings]:
        """Last applied settings, including their scale."""
        return self._settings

    def apply(self, settings: FalloffSettings) -> bool:
        """Store *settings*; return True if the cache was invalidated."""
        changed = self._settings != settings
        if changed:
            self._cache.clear()
            logger.debug("Settings changed, cleared weight cache: %s", settings)
        self._settings = settings
        return changed


def _vec3(value, name: str) -> Vec3:
    coords = tuple(float(v) for v in value)
    if len(coords) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(coords)}")
    return coords
