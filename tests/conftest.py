"""
Shared test fixtures for part falloff tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest
import trimesh

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from falloff_settings import FalloffMode, FalloffSettings
from part_map import PartitionMap
from weight_cache import WeightCache


@pytest.fixture
def line_points():
    """Single-point partitions along the x axis.

    Partition ids are deliberately non-contiguous.
    """
    return [
        (10, (0.0, 0.0, 0.0)),
        (20, (10.0, 0.0, 0.0)),
        (30, (-5.0, 0.0, 0.0)),
        (40, (15.0, 0.0, 0.0)),
        (50, (5.0, 0.0, 0.0)),
    ]


@pytest.fixture
def line_map(line_points):
    part_map = PartitionMap()
    part_map.build(line_points)
    return part_map


@pytest.fixture
def cache():
    return WeightCache()


@pytest.fixture
def x_axis_settings():
    """Positional falloff from (0,0,0) to (10,0,0)."""
    return FalloffSettings(
        mode=FalloffMode.POSITION,
        min_pos=(0.0, 0.0, 0.0),
        max_pos=(10.0, 0.0, 0.0),
        seed=0,
        scale=1.0,
    )


@pytest.fixture
def box_points():
    """Two partitions, each the 8 corners of an axis-aligned box."""
    points = []
    for part, (lo, hi) in {
        3: ((0.0, 0.0, 0.0), (2.0, 4.0, 6.0)),
        7: ((10.0, -2.0, 1.0), (12.0, 2.0, 3.0)),
    }.items():
        for x in (lo[0], hi[0]):
            for y in (lo[1], hi[1]):
                for z in (lo[2], hi[2]):
                    points.append((part, (x, y, z)))
    return points


@pytest.fixture
def islands_mesh():
    """Three disjoint 10mm cubes centred at x = 0, 50, 100."""
    boxes = []
    for x in (0.0, 50.0, 100.0):
        box = trimesh.creation.box(extents=[10, 10, 10])
        box.apply_translation([x, 0.0, 0.0])
        boxes.append(box)
    return trimesh.util.concatenate(boxes)


@pytest.fixture
def islands_mesh_file(islands_mesh, tmp_path) -> str:
    path = tmp_path / "islands.stl"
    islands_mesh.export(path)
    return str(path)


@pytest.fixture
def scattered_points():
    """200 random points over 40 partitions."""
    rng = np.random.default_rng(7)
    ids = rng.integers(0, 40, size=200)
    positions = rng.uniform(-50.0, 50.0, size=(200, 3))
    return [(int(i), tuple(p)) for i, p in zip(ids, positions)]
