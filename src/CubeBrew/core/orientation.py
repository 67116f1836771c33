"""Version-dependent face orientation fixes for decoded cubemap levels.

Exporters before 3.0 wrote every level upside down with the +Y/-Y faces
exchanged. From 3.0 on, the exporter pre-flips the base level, so only the
smaller levels still need their rows reversed.
"""

import logging
from typing import MutableSequence, Tuple

import numpy as np

logger = logging.getLogger("cubebrew.orientation")

SIDE_SWAP_FACES = (2, 3)
PREFLIPPED_BASE_VERSION = 3.0


def flip_rows(face: np.ndarray, width: int, num_channels: int) -> None:
    """Reverse the row order of a flat face buffer in place."""
    if width < 2:
        return
    rows = face.reshape(width, width * num_channels)
    temp = np.empty(width * num_channels, dtype=face.dtype)
    for r in range(width // 2):
        opposite = width - 1 - r
        temp[:] = rows[r]
        rows[r] = rows[opposite]
        rows[opposite] = temp


def swap_face_pair(faces: MutableSequence[np.ndarray],
                   pair: Tuple[int, int] = SIDE_SWAP_FACES) -> None:
    """Exchange the whole contents of two faces (default: faces 2 and 3)."""
    a, b = pair
    faces[a], faces[b] = faces[b], faces[a]


def normalize_level(faces: MutableSequence[np.ndarray], width: int,
                    num_channels: int, version: float,
                    is_base_level: bool) -> None:
    """Apply the orientation policy for one level's six faces in place."""
    if version < PREFLIPPED_BASE_VERSION:
        for face in faces:
            flip_rows(face, width, num_channels)
        swap_face_pair(faces)
        return

    if is_base_level:
        logger.debug("Base level already flipped by exporter (v%s).", np.float32(version))
        return
    for face in faces:
        flip_rows(face, width, num_channels)
