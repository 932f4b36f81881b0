"""Pytest configuration and fixtures for density-globe tests."""
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
import numpy as np


def make_grid_text(rows, nodata=-9999, xllcorner=0, yllcorner=0, cellsize=1):
    """Render rows as grid file text; None becomes the NODATA value."""
    lines = [
        f"ncols {len(rows[0])}",
        f"nrows {len(rows)}",
        f"xllcorner {xllcorner}",
        f"yllcorner {yllcorner}",
        f"cellsize {cellsize}",
        f"NODATA_value {nodata}",
    ]
    for row in rows:
        lines.append(" ".join(str(nodata if v is None else v) for v in row))
    return "\n".join(lines) + "\n"


@pytest.fixture
def grid_text_factory():
    return make_grid_text


@pytest.fixture
def grid_a():
    """2x2 grid A from the end-to-end example."""
    from src.globe.grid_data import parse_grid_text

    grid = parse_grid_text(make_grid_text([[1, 2], [3, 4]]), source="a.asc")
    assert grid.shape == (2, 2)
    return grid


@pytest.fixture
def grid_b():
    """2x2 grid B from the end-to-end example."""
    from src.globe.grid_data import parse_grid_text

    grid = parse_grid_text(make_grid_text([[4, 3], [2, 1]]), source="b.asc")
    assert grid.shape == (2, 2)
    return grid


@pytest.fixture
def grid_files(tmp_path):
    """Two 3x4 grid files with one missing cell each."""
    a = tmp_path / "male.asc"
    b = tmp_path / "female.asc"
    a.write_text(make_grid_text([[1, 5, 2, 8], [3, None, 4, 4], [0, 7, 6, 2]], xllcorner=-10, yllcorner=20))
    b.write_text(make_grid_text([[2, 5, 1, 8], [3, 3, 9, None], [1, 2, 6, 0]], xllcorner=-10, yllcorner=20))
    return a, b


@pytest.fixture
def displayable(grid_a, grid_b):
    """Four displayable descriptors built from grids A and B."""
    from src.globe.data_loading import DatasetDescriptor, build_displayable_datasets

    bases = [
        DatasetDescriptor("men", (0.7, 0.3), "a.asc", grid_a),
        DatasetDescriptor("women", (0.9, 1.1), "b.asc", grid_b),
    ]
    return build_displayable_datasets(bases)


@pytest.fixture
def globe_model(displayable):
    from src.globe.pipeline import build_globe_model

    model = build_globe_model(displayable)
    # 4 unmasked cells, 24 vertices per box
    assert model.mesh.base.vertex_count == 96
    return model


@pytest.fixture
def project_root():
    """Get the project root directory."""
    return Path(__file__).parent.parent
