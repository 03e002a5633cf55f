"""
Shared pytest fixtures and configuration for terragrid tests.
"""

import json

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def planar_grid():
    """3x5 grid rising one unit per column, offset by 0.5: 0.5 .. 4.5."""
    from terragrid.core.grid import ElevationGrid

    return ElevationGrid.from_rows([
        [0.5, 1.5, 2.5, 3.5, 4.5],
        [0.5, 1.5, 2.5, 3.5, 4.5],
        [0.5, 1.5, 2.5, 3.5, 4.5],
    ])


@pytest.fixture
def peak_grid():
    """3x3 grid with a single raised centre point."""
    from terragrid.core.grid import ElevationGrid

    return ElevationGrid.from_rows([
        [10.0, 10.0, 10.0],
        [10.0, 15.0, 10.0],
        [10.0, 10.0, 10.0],
    ])


@pytest.fixture
def sparse_grid():
    """4x4 survey with a few unsurveyed points."""
    from terragrid.core.grid import ElevationGrid

    return ElevationGrid.from_rows([
        [100.0, 101.0, None, 103.0],
        [100.5, 101.5, 102.5, 103.5],
        [None, 102.0, 103.0, 104.0],
        [101.5, 102.5, 103.5, None],
    ])


@pytest.fixture
def sample_grid():
    """Deterministic synthetic survey (8x8)."""
    from terragrid.io.grid_file import generate_sample_grid

    return generate_sample_grid(rows=8, cols=8)


@pytest.fixture
def grid_file(tmp_path, sample_grid):
    """Sample grid written to a JSON file."""
    path = tmp_path / "grid.json"
    path.write_text(json.dumps(sample_grid.to_rows()))
    return path


@pytest.fixture
def tmp_output_dir(tmp_path):
    """Temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
