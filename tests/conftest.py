"""
Shared test fixtures for roll polar unit tests.
"""

import struct

import numpy as np
import pytest

from rollpolar.codec.bpolar import encode, from_lists
from rollpolar.config import PolarConfig
from rollpolar.grid.control_file import parse_control_file


CONTROL_TEXT = "9876543 OCEAN  STAR\tTRADER\n10.0 7.0 4.0\n"


def _string(text: str) -> bytes:
    raw = text.encode('utf-8')
    assert len(raw) < 0x80
    return bytes([len(raw)]) + raw


@pytest.fixture
def sample_matrix():
    """4 speeds x 4 headings response matrix."""
    return from_lists(
        speeds=[0.0, 5.0, 10.0, 15.0],
        headings=[0.0, 90.0, 180.0, 270.0],
        max_roll=[
            [2.0, 10.0, 4.0, 12.0],
            [3.0, 14.0, 6.0, 16.0],
            [5.0, 20.0, 8.0, 22.0],
            [6.0, 25.0, 9.0, 28.0],
        ],
        source_key='sample',
        header1='PROLL v1',
        header2='Max roll (deg)',
        status='OK',
    )


@pytest.fixture
def sample_bytes(sample_matrix):
    """Encoded sample matrix."""
    return encode(sample_matrix)


@pytest.fixture
def make_bpolar():
    """
    Build a raw .bpolar buffer by hand.

    Triplets are written heading-outer, speed-inner, exactly as on disk.
    """
    def _make(speed_count, heading_count, speeds=None, headings=None,
              roll=None, header1='H1', header2='H2', status='OK'):
        out = bytearray()
        out += _string(header1)
        out += _string(header2)
        out += struct.pack('<ii', speed_count, heading_count)
        out += _string(status)
        if speeds is None:
            return bytes(out)
        for j in range(heading_count):
            for i in range(speed_count):
                out += struct.pack('<ddd', speeds[i], headings[j], roll(i, j))
        return bytes(out)
    return _make


@pytest.fixture
def control_text():
    """Control file text with tab and double-space separators."""
    return CONTROL_TEXT


@pytest.fixture
def control_data():
    """Parsed control file with Ts=10, Td=7, Ti=4."""
    return parse_control_file(CONTROL_TEXT)


@pytest.fixture
def data_root(tmp_path, sample_matrix):
    """
    On-disk data root with a control file, one dataset and its image.

        scantling/GM=1.5m/bin/MAXROLL_H5.5_T7.5.bpolar
        scantling/GM=1.5m/plots/POLAR_ROLL_H5.5_T7.5_polarplot.gif
        design/GM=1.0m/bin/MAXROLL_H3.0_T5.0.bpolar   (truncated)
    """
    (tmp_path / 'proll.ctl').write_text(CONTROL_TEXT)

    bin_dir = tmp_path / 'scantling' / 'GM=1.5m' / 'bin'
    bin_dir.mkdir(parents=True)
    (bin_dir / 'MAXROLL_H5.5_T7.5.bpolar').write_bytes(encode(sample_matrix))

    plots_dir = tmp_path / 'scantling' / 'GM=1.5m' / 'plots'
    plots_dir.mkdir(parents=True)
    (plots_dir / 'POLAR_ROLL_H5.5_T7.5_polarplot.gif').write_bytes(b'GIF89a\x01\x00\x01\x00')

    corrupt_dir = tmp_path / 'design' / 'GM=1.0m' / 'bin'
    corrupt_dir.mkdir(parents=True)
    (corrupt_dir / 'MAXROLL_H3.0_T5.0.bpolar').write_bytes(encode(sample_matrix)[:-10])

    return tmp_path


@pytest.fixture
def polar_config(data_root):
    """Config pointing at the temporary data root."""
    return PolarConfig(data_root=str(data_root))


@pytest.fixture
def ramp_matrix():
    """Values equal to radius index * 10 + angle index, for exact checks."""
    radii = [1.0, 2.0, 3.0]
    angles = [0.0, 90.0, 180.0, 270.0]
    matrix = np.array([[r * 10 + a for a in range(4)] for r in range(3)], dtype=float)
    return angles, radii, matrix
