"""Tests for seeded coherent noise."""
import numpy as np
import pytest

from coherent_noise import NoiseConfig, fractal_noise, perlin_noise_3d, seed_offset

SAMPLE_POINTS = [
    (0.3, 1.7, 2.4),
    (-4.2, 0.15, 7.9),
    (12.5, -3.3, 0.6),
    (101.1, 55.7, -20.25),
    (0.5, 0.5, 0.5),
]


class TestPerlinNoise:

    def test_zero_on_lattice(self):
        for p in [(0, 0, 0), (1, 2, 3), (-4, 7, 0)]:
            assert perlin_noise_3d(*p, seed=11) == pytest.approx(0.0, abs=1e-12)

    def test_bounded(self):
        rng = np.random.default_rng(0)
        for p in rng.uniform(-100.0, 100.0, size=(300, 3)):
            assert -1.5 <= perlin_noise_3d(*p, seed=2) <= 1.5

    def test_continuous(self):
        a = perlin_noise_3d(2.3, 4.1, 0.7, seed=5)
        b = perlin_noise_3d(2.3 + 1e-6, 4.1, 0.7, seed=5)
        assert abs(a - b) < 1e-4


class TestFractalNoise:

    def test_deterministic(self):
        for p in SAMPLE_POINTS:
            assert fractal_noise(p, seed=42) == fractal_noise(p, seed=42)

    def test_unit_range(self):
        rng = np.random.default_rng(1)
        for p in rng.uniform(-1000.0, 1000.0, size=(200, 3)):
            value = fractal_noise(p, seed=3)
            assert 0.0 <= value <= 1.0

    def test_seed_changes_field(self):
        a = [fractal_noise(p, seed=1) for p in SAMPLE_POINTS]
        b = [fractal_noise(p, seed=2) for p in SAMPLE_POINTS]
        assert a != b

    def test_negative_and_large_seeds(self):
        for seed in (-1, 2 ** 40):
            value = fractal_noise(SAMPLE_POINTS[0], seed=seed)
            assert 0.0 <= value <= 1.0

    def test_seed_offset_is_fractional(self):
        for seed in (0, 1, 9, -3, 12345):
            offset = seed_offset(seed)
            assert offset.shape == (3,)
            assert np.all(np.abs(offset - np.round(offset)) >= 0.1)
            assert np.array_equal(offset, seed_offset(seed))

    def test_integer_positions_vary(self):
        # Whole-number centres on a grid must not collapse to one value.
        grid = [(float(x), 0.0, 0.0) for x in range(0, 101, 10)]
        values = {fractal_noise(p, seed=9) for p in grid}
        assert len(values) > 1

    def test_integer_position_varies_with_seed(self):
        values = {fractal_noise((50.0, 0.0, 0.0), seed=s) for s in range(8)}
        assert len(values) > 1
        assert 0.5 not in values

    def test_accepts_numpy_position(self):
        p = SAMPLE_POINTS[1]
        assert fractal_noise(np.array(p), seed=4) == fractal_noise(p, seed=4)

    def test_single_octave_matches_perlin(self):
        config = NoiseConfig(octaves=1)
        x, y, z = SAMPLE_POINTS[2]
        ox, oy, oz = seed_offset(6)
        expected = float(np.clip(
            0.5 * (perlin_noise_3d(x + ox, y + oy, z + oz, 6) + 1.0), 0.0, 1.0,
        ))
        assert fractal_noise((x, y, z), seed=6, config=config) == pytest.approx(expected)


class TestNoiseConfig:

    def test_defaults(self):
        config = NoiseConfig()
        assert config.octaves == 4
        assert config.frequency == 1.0
        assert config.amplitude == 1.0

    def test_rejects_zero_octaves(self):
        with pytest.raises(ValueError):
            NoiseConfig(octaves=0)

    def test_rejects_non_positive_amplitude(self):
        with pytest.raises(ValueError):
            NoiseConfig(amplitude=0.0)
