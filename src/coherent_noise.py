"""
Seeded 3D gradient (Perlin) noise with fractal octave summation.

Everything here is a pure function of (position, seed, config). The only
shared state is a memoised, read-only permutation table and lattice
offset per seed, so the functions can be called from any number of
threads without locking.
"""

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np

# Edge midpoints of a cube: the 12 gradient directions of improved Perlin noise.
_GRADIENTS = np.array(
    [
        [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
        [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
        [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
    ],
    dtype=float,
)


@dataclass(frozen=True)
class NoiseConfig:
    """Fractal noise parameters."""

    octaves: int = 4
    frequency: float = 1.0
    amplitude: float = 1.0
    persistence: float = 0.5  # amplitude multiplier per octave
    lacunarity: float = 2.0   # frequency multiplier per octave

    def __post_init__(self):
        if self.octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {self.octaves}")
        if self.amplitude <= 0.0:
            raise ValueError(f"amplitude must be > 0, got {self.amplitude}")


@lru_cache(maxsize=64)
def _seed_tables(seed: int) -> Tuple[np.ndarray, np.ndarray]:
    """Doubled 256-entry permutation and lattice offset for *seed*, read-only."""
    rng = np.random.default_rng(seed % (2 ** 32))
    perm = rng.permutation(256).astype(np.int64)
    table = np.concatenate([perm, perm])
    table.flags.writeable = False
    # Kept away from whole numbers so integer positions never land on the lattice.
    offset = rng.uniform(0.1, 0.9, size=3)
    offset.flags.writeable = False
    return table, offset


def _permutation_table(seed: int) -> np.ndarray:
    return _seed_tables(seed)[0]


def seed_offset(seed: int) -> np.ndarray:
    """Fractional (3,) shift applied to every octave sample for *seed*."""
    return _seed_tables(int(seed))[1]


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


def _grad(h: int, x: float, y: float, z: float) -> float:
    g = _GRADIENTS[h % 12]
    return g[0] * x + g[1] * y + g[2] * z


def perlin_noise_3d(x: float, y: float, z: float, seed: int = 0) -> float:
    """Single-octave Perlin noise, roughly in [-1, 1]; 0 on lattice points."""
    p = _permutation_table(int(seed))

    fx, fy, fz = math.floor(x), math.floor(y), math.floor(z)
    xi, yi, zi = int(fx) & 255, int(fy) & 255, int(fz) & 255
    xf, yf, zf = x - fx, y - fy, z - fz
    u, v, w = _fade(xf), _fade(yf), _fade(zf)

    a = p[xi] + yi
    aa = p[a] + zi
    ab = p[a + 1] + zi
    b = p[xi + 1] + yi
    ba = p[b] + zi
    bb = p[b + 1] + zi

    x1 = _lerp(_grad(p[aa], xf, yf, zf), _grad(p[ba], xf - 1, yf, zf), u)
    x2 = _lerp(_grad(p[ab], xf, yf - 1, zf), _grad(p[bb], xf - 1, yf - 1, zf), u)
    y1 = _lerp(x1, x2, v)
    x1 = _lerp(_grad(p[aa + 1], xf, yf, zf - 1), _grad(p[ba + 1], xf - 1, yf, zf - 1), u)
    x2 = _lerp(
        _grad(p[ab + 1], xf, yf - 1, zf - 1),
        _grad(p[bb + 1], xf - 1, yf - 1, zf - 1),
        u,
    )
    y2 = _lerp(x1, x2, v)
    return float(_lerp(y1, y2, w))


def fractal_noise(position, seed: int = 0, config: Optional[NoiseConfig] = None) -> float:
    """Multi-octave noise at *position*, normalised to [0, 1].

    Each octave samples at ``position * frequency + seed_offset(seed)``, so
    whole-number positions still vary with the seed. Octave sums are
    divided by the total amplitude, then mapped from [-1, 1] to [0, 1] and
    clipped.
    """
    if config is None:
        config = NoiseConfig()
    x, y, z = (float(c) for c in position)
    ox, oy, oz = (float(c) for c in seed_offset(seed))

    total = 0.0
    norm = 0.0
    amplitude = config.amplitude
    frequency = config.frequency
    for _ in range(config.octaves):
        total += amplitude * perlin_noise_3d(
            x * frequency + ox, y * frequency + oy, z * frequency + oz, seed,
        )
        norm += amplitude
        amplitude *= config.persistence
        frequency *= config.lacunarity

    value = 0.5 * (total / norm + 1.0)
    return float(np.clip(value, 0.0, 1.0))
