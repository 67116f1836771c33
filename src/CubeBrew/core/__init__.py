"""Core decoder pieces -- re-exports all public symbols for convenience."""

from .errors import (
    DecodeError,
    HdreIOError,
    TruncatedHeaderError,
    UnsupportedFormatError,
    UnsupportedVersionError,
    TruncatedPayloadError,
    MalformedHeaderError,
    AssetReleasedError,
)
from .header import (
    HdreHeader, parse_header,
    HEADER_STRUCT, HEADER_SIZE, HDRE_SIGNATURE, FLOAT32_ARRAY_TAG,
    SH_COEFF_FLOATS,
)
from .pyramid import (
    MipLevel, N_LEVELS, N_FACES,
    level_width, face_size, payload_size,
    read_payload, build_pyramid, assemble_faces_array,
)
from .orientation import flip_rows, swap_face_pair, normalize_level
from .logging import setup_logging

__all__ = [
    "DecodeError", "HdreIOError", "TruncatedHeaderError",
    "UnsupportedFormatError", "UnsupportedVersionError",
    "TruncatedPayloadError", "MalformedHeaderError", "AssetReleasedError",
    "HdreHeader", "parse_header",
    "HEADER_STRUCT", "HEADER_SIZE", "HDRE_SIGNATURE", "FLOAT32_ARRAY_TAG",
    "SH_COEFF_FLOATS",
    "MipLevel", "N_LEVELS", "N_FACES",
    "level_width", "face_size", "payload_size",
    "read_payload", "build_pyramid", "assemble_faces_array",
    "flip_rows", "swap_face_pair", "normalize_level",
    "setup_logging",
]
