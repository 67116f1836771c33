"""Payload sizing, reading, and partitioning into a six-face mip pyramid."""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

import numpy as np

from .errors import HdreIOError, TruncatedPayloadError
from .header import HdreHeader

logger = logging.getLogger("cubebrew.pyramid")

N_LEVELS = 6
N_FACES = 6
FLOAT_DTYPE = np.dtype(np.float32)


def level_width(width: int, level: int) -> int:
    """Edge length of mip ``level``: ``floor(width / 2**level)``."""
    return width >> level


def face_size(width: int, num_channels: int, level: int) -> int:
    """Number of floats in one face of mip ``level``."""
    w = level_width(width, level)
    return w * w * num_channels


def payload_size(header: HdreHeader, num_levels: int = N_LEVELS) -> int:
    """Total float count stored after the header for ``num_levels`` levels."""
    return sum(
        face_size(header.width, header.num_channels, i) * N_FACES
        for i in range(num_levels)
    )


@dataclass
class MipLevel:
    """One mip level: a face-major buffer plus six per-face buffers."""

    index: int
    width: int
    faces: List[np.ndarray]
    faces_array: Optional[np.ndarray] = None

    @property
    def height(self) -> int:
        return self.width


def read_payload(stream: BinaryIO, header: HdreHeader,
                 num_levels: int = N_LEVELS,
                 path: Optional[str] = None) -> np.ndarray:
    """Seek to the payload and read exactly the floats the header implies.

    Returns a flat ``float32`` array. A short file raises
    ``TruncatedPayloadError`` instead of yielding zero-filled tail data; the
    size check runs before the read so a corrupt header declaring a huge
    cubemap never allocates a matching buffer.
    """
    expected = payload_size(header, num_levels)
    nbytes = expected * FLOAT_DTYPE.itemsize
    try:
        end = stream.seek(0, io.SEEK_END)
        remaining = max(0, end - header.payload_offset)
        data = b""
        if remaining >= nbytes:
            stream.seek(header.payload_offset)
            data = stream.read(nbytes)
            remaining = len(data)
    except OSError as exc:
        raise HdreIOError(f"Failed to read payload: {exc}", path=path) from exc

    if len(data) < nbytes:
        available = remaining // FLOAT_DTYPE.itemsize
        logger.error(
            "Truncated HDRE payload in %s: %d of %d floats available.",
            path or "<stream>", available, expected,
        )
        raise TruncatedPayloadError(
            f"Payload truncated: expected {expected} floats "
            f"({nbytes} bytes), found {available}",
            expected=expected,
            available=available,
            path=path,
        )

    # bytes -> read-only array without an extra copy.
    return np.frombuffer(data, dtype=FLOAT_DTYPE, count=expected)


def build_pyramid(header: HdreHeader, raw: np.ndarray,
                  num_levels: int = N_LEVELS) -> Tuple[MipLevel, ...]:
    """Split the flat payload into levels, then faces, copying each slice.

    Every face is an independent writable array so orientation fixes can be
    applied in place. ``faces_array`` is left unset; call
    ``assemble_faces_array`` once the faces are final.
    """
    expected = payload_size(header, num_levels)
    if raw.size != expected:
        raise ValueError(
            f"Raw buffer holds {raw.size} floats, header implies {expected}"
        )

    levels = []
    offset = 0
    for i in range(num_levels):
        w = level_width(header.width, i)
        fsize = face_size(header.width, header.num_channels, i)
        faces = []
        for j in range(N_FACES):
            start = offset + j * fsize
            faces.append(raw[start:start + fsize].copy())
        offset += fsize * N_FACES
        levels.append(MipLevel(index=i, width=w, faces=faces))
        logger.debug("Level %d: %dx%d, %d floats per face", i, w, w, fsize)
    return tuple(levels)


def assemble_faces_array(level: MipLevel) -> np.ndarray:
    """Concatenate the level's final face buffers into ``faces_array``."""
    level.faces_array = np.concatenate(level.faces)
    return level.faces_array
