"""
Tests for the command line entry point.
"""

import json

import pytest

from rollpolar.main import build_parser, main


@pytest.fixture
def bpolar_file(tmp_path, sample_bytes):
    path = tmp_path / 'MAXROLL_H5.5_T7.5.bpolar'
    path.write_bytes(sample_bytes)
    return path


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_fit_requires_parameters(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['fit', '--gm', '1.5'])

    def test_fit_draft_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['fit', '--gm', '1', '--hs', '3', '--tz', '5',
                                       '--draft', 'ballast'])

    @pytest.mark.parametrize('flag, value', [
        ('--gm', 'inf'),
        ('--hs', 'nan'),
        ('--tz', '-inf'),
        ('--aft', 'nan'),
    ])
    def test_fit_rejects_non_finite(self, flag, value):
        argv = ['fit', '--gm', '1.5', '--hs', '5.5', '--tz', '7.5', flag, value]

        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(argv)
        assert exc_info.value.code == 2


class TestInspect:
    def test_inspect(self, bpolar_file, capsys):
        assert main(['inspect', str(bpolar_file)]) == 0

        out = capsys.readouterr().out
        assert "Speeds:    4 [0, 5, 10, 15]" in out
        assert "Headings:  4 [0, 90, 180, 270]" in out
        assert "Peak roll: 28.00 deg at 15 kn, 270 deg" in out

    def test_missing_file(self, tmp_path):
        assert main(['inspect', str(tmp_path / 'missing.bpolar')]) == 1

    def test_corrupt_file(self, tmp_path, sample_bytes):
        path = tmp_path / 'short.bpolar'
        path.write_bytes(sample_bytes[:20])

        assert main(['inspect', str(path)]) == 1


class TestFit:
    def test_fit(self, capsys):
        assert main(['fit', '--gm', '1.73', '--hs', '5.6', '--tz', '7.4']) == 0

        out = capsys.readouterr().out
        assert "Draft:   scantling" in out
        assert "Dataset: scantling/GM=1.5m/bin/MAXROLL_H5.5_T7.5.bpolar" in out
        assert "Image:   scantling/GM=1.5m/plots/POLAR_ROLL_H5.5_T7.5_polarplot.gif" in out

    def test_fit_with_control(self, data_root, capsys):
        argv = ['fit', '--gm', '1.5', '--hs', '5.5', '--tz', '7.5',
                '--aft', '8.4', '--fore', '8.4', '--control', str(data_root / 'proll.ctl')]

        assert main(argv) == 0
        assert "Draft:   design" in capsys.readouterr().out

    def test_missing_control_uses_fixed_thresholds(self, tmp_path, capsys):
        argv = ['fit', '--gm', '1.5', '--hs', '5.5', '--tz', '7.5',
                '--aft', '8.4', '--fore', '8.4', '--control', str(tmp_path / 'proll.ctl')]

        assert main(argv) == 0
        assert "Draft:   scantling" in capsys.readouterr().out

    def test_config_rounding(self, tmp_path, capsys):
        config_path = tmp_path / 'config.json'
        config_path.write_text(json.dumps({'rounding': 'half_even'}))

        argv = ['--config', str(config_path), 'fit', '--gm', '1.25', '--hs', '5.25', '--tz', '7.25']
        assert main(argv) == 0

        out = capsys.readouterr().out
        assert "GM:      1.0 m" in out
        assert "Dataset: scantling/GM=1.0m/bin/MAXROLL_H5.0_T7.0.bpolar" in out

    def test_bad_config(self, tmp_path):
        config_path = tmp_path / 'config.json'
        config_path.write_text(json.dumps({'colour': 'red'}))

        assert main(['--config', str(config_path), 'fit', '--gm', '1', '--hs', '3', '--tz', '5']) == 1

    def test_missing_config(self, tmp_path):
        argv = ['--config', str(tmp_path / 'none.json'), 'fit', '--gm', '1', '--hs', '3', '--tz', '5']

        assert main(argv) == 1


class TestDensify:
    def test_output_file(self, bpolar_file, tmp_path):
        output = tmp_path / 'grid.json'

        assert main(['densify', str(bpolar_file), '--angles', '36',
                     '--density', '2', '--output', str(output)]) == 0

        body = json.loads(output.read_text())
        assert len(body['angles']) == 36
        assert len(body['radii']) == 8
        assert len(body['values']) == 8

    def test_stdout(self, bpolar_file, capsys):
        assert main(['densify', str(bpolar_file), '--angles', '8', '--density', '1', '--weighted']) == 0

        body = json.loads(capsys.readouterr().out)
        assert body['angles'] == [0.0, 45.0, 90.0, 135.0, 180.0, 225.0, 270.0, 315.0]
        assert len(body['values']) == 4

    def test_invalid_angle_count(self, bpolar_file):
        assert main(['densify', str(bpolar_file), '--angles', '-4']) == 1
