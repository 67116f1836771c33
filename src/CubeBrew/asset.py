"""Decoded HDRE asset and the file loader that builds it."""

import logging
import os
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .config import DecoderConfig
from .core import (
    AssetReleasedError,
    HdreHeader,
    HdreIOError,
    MipLevel,
    N_FACES,
    assemble_faces_array,
    build_pyramid,
    normalize_level,
    parse_header,
    read_payload,
)

logger = logging.getLogger("cubebrew.asset")


class LevelView(NamedTuple):
    """Borrowed, read-only views of one mip level."""

    index: int
    width: int
    height: int
    faces_array: np.ndarray
    faces: Tuple[np.ndarray, ...]


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class HdreAsset:
    """Owned in-memory representation of a decoded HDRE cubemap.

    Holds the header, the flat raw payload, and the normalized mip pyramid.
    All buffers are read-only; accessors return views into them.
    """

    def __init__(self, header: HdreHeader, raw: np.ndarray,
                 levels: Tuple[MipLevel, ...], path: Optional[str] = None):
        """Take ownership of decoded buffers; use ``load_hdre`` to create one."""
        self.header = header
        self.path = path
        self._raw = _freeze(raw)
        for level in levels:
            _freeze(level.faces_array)
            for face in level.faces:
                _freeze(face)
            level.faces = tuple(level.faces)
        self._levels = tuple(levels)
        self._released = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        state = "released" if self._released else f"{self.num_levels} levels"
        return (
            f"HdreAsset(path={self.path!r}, v{self.header.version_string}, "
            f"{self.width}x{self.height}x{self.num_channels}, {state})"
        )

    def _check_alive(self):
        if self._released:
            raise AssetReleasedError(
                f"HDRE asset {self.path or '<memory>'} has been released"
            )

    # -- header-derived properties ------------------------------------------------

    @property
    def released(self) -> bool:
        return self._released

    @property
    def version(self) -> float:
        return self.header.version

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def num_channels(self) -> int:
        return self.header.num_channels

    @property
    def max_luminance(self) -> float:
        return self.header.max_luminance

    @property
    def has_sh(self) -> bool:
        return self.header.includes_sh

    @property
    def sh_coeffs(self) -> Optional[np.ndarray]:
        """Spherical-harmonics coefficients, or None when not exported."""
        return self.header.sh_coeffs

    @property
    def num_levels(self) -> int:
        return len(self._levels)

    @property
    def nbytes(self) -> int:
        """Bytes held by the raw buffer plus both per-level views."""
        if self._released:
            return 0
        total = self._raw.nbytes
        for level in self._levels:
            total += level.faces_array.nbytes
            total += sum(face.nbytes for face in level.faces)
        return total

    # -- buffer accessors ---------------------------------------------------------

    def raw_buffer(self) -> np.ndarray:
        """Whole payload: level-major, then face-major, then pixel order."""
        self._check_alive()
        return self._raw

    def level(self, n: int) -> LevelView:
        """Return views of mip level ``n`` (0 is full resolution)."""
        self._check_alive()
        if not 0 <= n < len(self._levels):
            raise IndexError(
                f"Mip level {n} out of range 0..{len(self._levels) - 1}"
            )
        lvl = self._levels[n]
        return LevelView(lvl.index, lvl.width, lvl.height,
                         lvl.faces_array, lvl.faces)

    @property
    def levels(self) -> Tuple[LevelView, ...]:
        return tuple(self.level(i) for i in range(self.num_levels))

    def face(self, level: int, face_index: int) -> np.ndarray:
        """Flat view of one face of one level."""
        faces = self.level(level).faces
        if not 0 <= face_index < N_FACES:
            raise IndexError(f"Face index {face_index} out of range 0..{N_FACES - 1}")
        return faces[face_index]

    def face_image(self, level: int, face_index: int) -> np.ndarray:
        """One face reshaped to ``(width, width, num_channels)`` without copying."""
        w = self.level(level).width
        return self.face(level, face_index).reshape(w, w, self.num_channels)

    def describe(self) -> dict:
        """Plain summary of the header and pyramid, for logs and the CLI."""
        return {
            "path": self.path,
            "version": self.header.version_string,
            "width": self.width,
            "height": self.height,
            "num_channels": self.num_channels,
            "bits_per_channel": self.header.bits_per_channel,
            "max_luminance": self.max_luminance,
            "includes_sh": self.has_sh,
            "num_sh_coeffs": self.header.num_sh_coeffs,
            "levels": [
                {"level": lvl.index, "width": lvl.width, "height": lvl.height}
                for lvl in self._levels
            ],
        }

    # -- teardown -----------------------------------------------------------------

    def release(self) -> bool:
        """Drop every owned buffer. Safe to call more than once.

        Returns True when buffers were released by this call.
        """
        if self._released:
            return False
        self._released = True
        self._raw = None
        for level in self._levels:
            level.faces_array = None
            level.faces = ()
        self._levels = ()
        logger.debug("Released HDRE asset %s", self.path)
        return True


def decode_hdre(stream, path: Optional[str] = None,
                config: Optional[DecoderConfig] = None) -> HdreAsset:
    """Decode an already-open binary stream into an ``HdreAsset``.

    Nothing is constructed until the header and the full payload have been
    validated, so a failure never leaves a partial asset behind.
    """
    cfg = config or DecoderConfig()
    header = parse_header(stream, path=path, strict_signature=cfg.strict_signature)
    raw = read_payload(stream, header, cfg.num_levels, path=path)
    levels = build_pyramid(header, raw, cfg.num_levels)

    for level in levels:
        normalize_level(
            level.faces, level.width, header.num_channels, header.version,
            is_base_level=level.index == 0,
        )
        assemble_faces_array(level)

    return HdreAsset(header, raw, levels, path=path)


def load_hdre(path: str, config: Optional[DecoderConfig] = None) -> HdreAsset:
    """Open ``path`` and decode it.

    Raises:
        HdreIOError: the file cannot be opened or read.
        DecodeError: any validation failure (see ``CubeBrew.core.errors``).

    """
    path = os.fspath(path)
    try:
        f = open(path, "rb")
    except OSError as exc:
        logger.error("Cannot open HDRE file '%s': %s", path, exc)
        raise HdreIOError(f"Cannot open file: {exc.strerror or exc}", path=path) from exc
    with f:
        asset = decode_hdre(f, path=path, config=config)
    logger.info(
        "'%s' (v%s) loaded successfully", path, asset.header.version_string
    )
    return asset
