"""Shared test fixtures and a minimal HDRE file writer."""

import shutil
import tempfile

import numpy as np
import pytest

from CubeBrew.config import CubeBrewConfig
from CubeBrew.core import HEADER_SIZE, HEADER_STRUCT, N_FACES, N_LEVELS, SH_COEFF_FLOATS


def expected_payload_floats(width, num_channels, num_levels=N_LEVELS):
    return sum((width >> i) ** 2 * N_FACES * num_channels for i in range(num_levels))


def make_header_bytes(version=3.0, width=4, num_channels=1, format_tag=3,
                      sh_coeffs=None, payload_offset=None, signature=b"HDRE",
                      bits_per_channel=32, max_luminance=1.0, height=None,
                      max_file_size=0.0):
    """Pack a header block in the same native layout the decoder reads."""
    coeffs = list(sh_coeffs) if sh_coeffs is not None else [0.0] * SH_COEFF_FLOATS
    return HEADER_STRUCT.pack(
        signature,
        version,
        width,
        width if height is None else height,
        max_file_size,
        num_channels,
        bits_per_channel,
        HEADER_SIZE if payload_offset is None else payload_offset,
        format_tag,
        max_luminance,
        1 if sh_coeffs is not None else 0,
        SH_COEFF_FLOATS // 3 if sh_coeffs is not None else 0,
        *coeffs,
    )


def write_hdre(path, payload=None, num_levels=N_LEVELS, missing_floats=0,
               **header_kwargs):
    """Write a synthetic HDRE file and return the float payload written.

    The default payload is ``0..n-1`` so tests can compare literal indices.
    ``missing_floats`` drops that many floats from the end of the file.
    """
    width = header_kwargs.get("width", 4)
    channels = header_kwargs.get("num_channels", 1)
    if payload is None:
        count = expected_payload_floats(width, channels, num_levels)
        payload = np.arange(count, dtype=np.float32)
    payload = np.asarray(payload, dtype=np.float32)

    header = make_header_bytes(**header_kwargs)
    offset = header_kwargs.get("payload_offset") or HEADER_SIZE
    data = payload.tobytes()
    if missing_floats:
        data = data[:len(data) - missing_floats * 4]
    with open(path, "wb") as f:
        f.write(header)
        f.write(b"\x00" * (offset - len(header)))
        f.write(data)
    return payload


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def default_config():
    return CubeBrewConfig()
