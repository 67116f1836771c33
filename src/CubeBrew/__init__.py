"""Decode HDRE prefiltered cubemap files into per-level, per-face buffers."""

__version__ = "1.0.0"

from .core import (  # noqa: E402
    DecodeError,
    HdreIOError,
    UnsupportedFormatError,
    UnsupportedVersionError,
    TruncatedPayloadError,
    MalformedHeaderError,
    AssetReleasedError,
    HdreHeader,
    N_LEVELS,
    N_FACES,
)
from .asset import HdreAsset, LevelView, decode_hdre, load_hdre  # noqa: E402
from .registry import AssetRegistry  # noqa: E402

__all__ = [
    "__version__",
    "DecodeError", "HdreIOError", "UnsupportedFormatError",
    "UnsupportedVersionError", "TruncatedPayloadError",
    "MalformedHeaderError", "AssetReleasedError",
    "HdreHeader", "N_LEVELS", "N_FACES",
    "HdreAsset", "LevelView", "decode_hdre", "load_hdre",
    "AssetRegistry",
]
