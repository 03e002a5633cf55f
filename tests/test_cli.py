"""
CLI command tests using Click's test runner.
"""

import pytest
import json

from terragrid.cli import main


class TestCLIInfo:
    """Test 'info' command."""

    def test_info_sample_grid(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, ['info', str(grid_file)])

        assert result.exit_code == 0
        assert 'GRID INFO' in result.output
        assert 'Rows x Cols:    8 x 8' in result.output
        assert 'Relief:' in result.output

    def test_info_missing_file(self, cli_runner):
        result = cli_runner.invoke(main, ['info', 'nonexistent.json'])

        assert result.exit_code != 0

    def test_info_invalid_json(self, cli_runner, tmp_output_dir):
        bad = tmp_output_dir / "bad.json"
        bad.write_text("{not json")

        result = cli_runner.invoke(main, ['info', str(bad)])

        assert result.exit_code == 1
        assert 'Error loading grid' in result.output

    def test_info_all_absent(self, cli_runner, tmp_output_dir):
        path = tmp_output_dir / "empty.json"
        path.write_text("[[null, null], [null, null]]")

        result = cli_runner.invoke(main, ['info', str(path)])

        assert result.exit_code == 0
        assert '0 surveyed' in result.output


class TestCLIContours:
    """Test 'contours' command."""

    def test_contours_summary(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, ['contours', str(grid_file), '-i', '1', '-m', '5'])

        assert result.exit_code == 0
        assert 'CONTOUR LEVELS' in result.output
        assert 'major' in result.output or 'minor' in result.output

    def test_contours_json_output(self, cli_runner, grid_file, tmp_output_dir):
        output_json = tmp_output_dir / "contours.json"

        result = cli_runner.invoke(main, [
            'contours', str(grid_file),
            '--interval', '2',
            '--svg-paths',
            '--output', str(output_json),
        ])

        assert result.exit_code == 0
        assert output_json.exists()

        with open(output_json) as f:
            data = json.load(f)
        assert data['config']['interval'] == 2.0
        assert len(data['levels']) > 0
        assert len(data['paths']) == len(data['levels'])
        first = data['paths'][0]['paths'][0]
        assert first.startswith('M')

    def test_contours_flat_grid(self, cli_runner, tmp_output_dir):
        path = tmp_output_dir / "flat.json"
        path.write_text("[[5, 5], [5, 5]]")

        result = cli_runner.invoke(main, ['contours', str(path), '-i', '2'])

        assert result.exit_code == 0
        assert 'No contours' in result.output

    def test_contours_invalid_interval(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, ['contours', str(grid_file), '--interval', '0'])

        assert result.exit_code == 1
        assert 'must be positive' in result.output

    def test_contours_invalid_major(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, ['contours', str(grid_file), '--major', '0'])

        assert result.exit_code == 1
        assert 'at least 1' in result.output


class TestCLISlopeAndFlow:
    """Test 'slope' and 'flow' commands."""

    def test_slope(self, cli_runner, grid_file, tmp_output_dir):
        output_json = tmp_output_dir / "slope.json"

        result = cli_runner.invoke(main, [
            'slope', str(grid_file), '--spacing', '10', '-o', str(output_json),
        ])

        assert result.exit_code == 0
        assert 'Max Slope' in result.output

        with open(output_json) as f:
            data = json.load(f)
        assert data['spacing'] == 10.0
        assert len(data['slope']) == 8
        assert len(data['slope'][0]) == 8

    def test_slope_invalid_spacing(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, ['slope', str(grid_file), '--spacing', '0'])

        assert result.exit_code == 1
        assert 'must be positive' in result.output

    def test_flow(self, cli_runner, grid_file, tmp_output_dir):
        output_json = tmp_output_dir / "flow.json"

        result = cli_runner.invoke(main, [
            'flow', str(grid_file), '--spacing', '10', '-o', str(output_json),
        ])

        assert result.exit_code == 0
        assert 'FLOW DIRECTION' in result.output

        with open(output_json) as f:
            data = json.load(f)
        assert len(data['flow']) == 8


class TestCLICutFill:
    """Test 'cutfill' command."""

    def test_cutfill_summary(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, [
            'cutfill', str(grid_file), '--spacing', '10', '--datum', '98',
        ])

        assert result.exit_code == 0
        assert 'CUT / FILL SUMMARY' in result.output
        assert 'cubic m' in result.output

    def test_cutfill_json_output(self, cli_runner, tmp_output_dir):
        grid_path = tmp_output_dir / "grid.json"
        grid_path.write_text("[[0, 0, 10], [0, 0, 10]]")
        output_json = tmp_output_dir / "volumes.json"

        result = cli_runner.invoke(main, [
            'cutfill', str(grid_path),
            '--datum', '2',
            '--units', 'ft',
            '--output', str(output_json),
        ])

        assert result.exit_code == 0
        with open(output_json) as f:
            data = json.load(f)
        assert data['units'] == 'ft'
        assert data['cut_volume'] == pytest.approx(3.0)
        assert data['fill_volume'] == pytest.approx(2.0)
        assert data['cell_count'] == 2

    def test_cutfill_requires_datum(self, cli_runner, grid_file):
        result = cli_runner.invoke(main, ['cutfill', str(grid_file)])

        assert result.exit_code != 0

    def test_cutfill_output_dir_missing(self, cli_runner, grid_file, tmp_output_dir):
        output_json = tmp_output_dir / "missing" / "volumes.json"

        result = cli_runner.invoke(main, [
            'cutfill', str(grid_file), '--datum', '98', '-o', str(output_json),
        ])

        assert result.exit_code == 1
        assert 'does not exist' in result.output


class TestCLIGenerateSample:
    """Test 'generate-sample' command."""

    def test_generate_sample(self, cli_runner, tmp_output_dir):
        output_file = tmp_output_dir / "sample.json"

        result = cli_runner.invoke(main, [
            'generate-sample',
            '--output', str(output_file),
            '--rows', '6',
            '--cols', '10',
        ])

        assert result.exit_code == 0
        assert output_file.exists()

        rows = json.loads(output_file.read_text())
        assert len(rows) == 6
        assert all(len(row) == 10 for row in rows)

    def test_generate_sample_too_small(self, cli_runner, tmp_output_dir):
        output_file = tmp_output_dir / "sample.json"

        result = cli_runner.invoke(main, [
            'generate-sample',
            '--output', str(output_file),
            '--rows', '1',
        ])

        assert result.exit_code != 0
        assert 'at least 2' in result.output


class TestCLIProjectSettings:
    """Settings stored in a project file fill in options that are not given."""

    @pytest.fixture
    def project_file(self, tmp_output_dir):
        path = tmp_output_dir / "project.json"
        path.write_text(json.dumps({
            "version": "1.0",
            "project": {
                "name": "Ridge Lot",
                "spacing": 2,
                "units": "ft",
                "contourInterval": 2,
                "majorMultiplier": 2,
            },
            "grid": [[0, 2, 4], [0, 2, 4], [0, 2, 4]],
        }))
        return path

    def test_info_shows_project(self, cli_runner, project_file):
        result = cli_runner.invoke(main, ['info', str(project_file)])

        assert result.exit_code == 0
        assert 'Ridge Lot' in result.output
        assert 'Spacing:        2.0 ft' in result.output
        assert 'rgb(' in result.output

    def test_slope_uses_stored_spacing(self, cli_runner, project_file, tmp_output_dir):
        output_json = tmp_output_dir / "slope.json"

        result = cli_runner.invoke(main, ['slope', str(project_file), '-o', str(output_json)])

        assert result.exit_code == 0
        data = json.loads(output_json.read_text())
        assert data['spacing'] == 2.0
        assert data['slope'][1][1] == pytest.approx(100.0)

    def test_option_overrides_stored_spacing(self, cli_runner, project_file, tmp_output_dir):
        output_json = tmp_output_dir / "slope.json"

        result = cli_runner.invoke(main, [
            'slope', str(project_file), '--spacing', '1', '-o', str(output_json),
        ])

        assert result.exit_code == 0
        data = json.loads(output_json.read_text())
        assert data['slope'][1][1] == pytest.approx(200.0)

    def test_contours_use_stored_interval(self, cli_runner, project_file, tmp_output_dir):
        output_json = tmp_output_dir / "contours.json"

        result = cli_runner.invoke(main, ['contours', str(project_file), '-o', str(output_json)])

        assert result.exit_code == 0
        data = json.loads(output_json.read_text())
        assert data['config']['interval'] == 2.0
        assert data['config']['major_multiplier'] == 2
        assert [level['level'] for level in data['levels']] == [2.0, 4.0]

    def test_cutfill_uses_stored_units(self, cli_runner, project_file):
        result = cli_runner.invoke(main, ['cutfill', str(project_file), '--datum', '1'])

        assert result.exit_code == 0
        assert 'cubic ft' in result.output
