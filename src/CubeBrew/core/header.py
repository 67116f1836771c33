"""Fixed-size HDRE header block: layout, dataclass, and validation."""

import logging
import math
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

import numpy as np

from .errors import (
    MalformedHeaderError,
    TruncatedHeaderError,
    UnsupportedFormatError,
    UnsupportedVersionError,
)

logger = logging.getLogger("cubebrew.header")

HDRE_SIGNATURE = b"HDRE"
# Array type written by the exporter: 1 = Uint8, 2 = Uint16/half, 3 = Float32.
FLOAT32_ARRAY_TAG = 3
MIN_SUPPORTED_VERSION = 2.0
# 9 RGB spherical-harmonics coefficients.
SH_COEFF_FLOATS = 27

# Native byte order, no alignment padding.
HEADER_STRUCT = struct.Struct(
    "=4s"   # signature
    "f"     # version
    "H"     # width
    "H"     # height
    "f"     # max_file_size
    "H"     # num_channels
    "H"     # bits_per_channel
    "H"     # payload_offset (header size in bytes)
    "H"     # format_tag
    "f"     # max_luminance
    "H"     # includes_sh
    "H"     # num_sh_coeffs
    f"{SH_COEFF_FLOATS}f"
)
HEADER_SIZE = HEADER_STRUCT.size


@dataclass(frozen=True)
class HdreHeader:
    """Decoded header of an HDRE file."""

    signature: bytes
    version: float
    width: int
    height: int
    max_file_size: float
    num_channels: int
    bits_per_channel: int
    payload_offset: int
    format_tag: int
    max_luminance: float
    includes_sh: bool
    num_sh_coeffs: int = 0
    sh_coeffs: Optional[np.ndarray] = field(default=None, compare=False)

    @property
    def version_string(self) -> str:
        """Shortest decimal form of the stored float32, for display only."""
        return str(np.float32(self.version))


def parse_header(stream: BinaryIO, path: Optional[str] = None,
                 strict_signature: bool = False) -> HdreHeader:
    """Read and validate the header block from the current stream position.

    Raises:
        TruncatedHeaderError: fewer than ``HEADER_SIZE`` bytes available.
        UnsupportedFormatError: payload is not Float32Array data.
        UnsupportedVersionError: version older than 2.0, or not a finite number.
        MalformedHeaderError: non-square or empty faces, zero channels, payload offset
            inside the header, or (with ``strict_signature``) a bad signature.

    """
    block = stream.read(HEADER_SIZE)
    if len(block) < HEADER_SIZE:
        raise TruncatedHeaderError(
            f"File too short for HDRE header: got {len(block)} of "
            f"{HEADER_SIZE} bytes",
            path=path,
        )

    values = HEADER_STRUCT.unpack(block)
    (signature, version, width, height, max_file_size, num_channels,
     bits_per_channel, payload_offset, format_tag, max_luminance,
     includes_sh, num_sh_coeffs) = values[:12]
    coeffs = values[12:]

    if signature != HDRE_SIGNATURE:
        if strict_signature:
            raise MalformedHeaderError(
                f"Bad signature {signature!r}, expected {HDRE_SIGNATURE!r}",
                path=path,
            )
        logger.warning(
            "Unexpected HDRE signature %r in %s; continuing.",
            signature, path or "<stream>",
        )

    if format_tag != FLOAT32_ARRAY_TAG:
        logger.error(
            "ArrayType %d not supported in %s. Please export in Float32Array.",
            format_tag, path or "<stream>",
        )
        raise UnsupportedFormatError(
            f"Unsupported array type {format_tag}; only Float32Array "
            f"(type {FLOAT32_ARRAY_TAG}) is supported",
            path=path,
        )

    if not math.isfinite(version):
        raise UnsupportedVersionError(
            f"Version field is not a finite number ({version})", path=path,
        )
    # Compared as stored: 2.0 and 3.0 are exact in float32.
    if version < MIN_SUPPORTED_VERSION:
        logger.error(
            "HDRE version %s in %s is no longer supported. "
            "Please re-export the environment.",
            np.float32(version), path or "<stream>",
        )
        raise UnsupportedVersionError(
            f"Version {np.float32(version)} is below the minimum supported 2.0",
            path=path,
        )

    if width != height or width < 1:
        raise MalformedHeaderError(
            f"Cubemap faces must be square and non-empty, got {width}x{height}",
            path=path,
        )
    if num_channels < 1:
        raise MalformedHeaderError("num_channels must be >= 1", path=path)
    if payload_offset < HEADER_SIZE:
        raise MalformedHeaderError(
            f"Payload offset {payload_offset} overlaps the {HEADER_SIZE}-byte header",
            path=path,
        )

    sh = None
    if includes_sh:
        sh = np.asarray(coeffs, dtype=np.float32)
        sh.setflags(write=False)
    else:
        num_sh_coeffs = 0

    header = HdreHeader(
        signature=signature,
        version=float(version),
        width=width,
        height=height,
        max_file_size=float(max_file_size),
        num_channels=num_channels,
        bits_per_channel=bits_per_channel,
        payload_offset=payload_offset,
        format_tag=format_tag,
        max_luminance=float(max_luminance),
        includes_sh=bool(includes_sh),
        num_sh_coeffs=num_sh_coeffs,
        sh_coeffs=sh,
    )
    logger.debug(
        "Parsed header: v%s %dx%d channels=%d bits=%d offset=%d sh=%s",
        header.version_string, width, height, num_channels,
        bits_per_channel, payload_offset, header.includes_sh,
    )
    return header
