"""Exception types raised while decoding HDRE files."""

from typing import Optional


class DecodeError(Exception):
    """Base class for every failure of a single HDRE decode attempt."""

    def __init__(self, message: str, path: Optional[str] = None):
        """Store the message and, when known, the file being decoded."""
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        """Prefix the message with the source path when one is attached."""
        message = super().__str__()
        if self.path:
            return f"{self.path}: {message}"
        return message


class HdreIOError(DecodeError, OSError):
    """Raised when the file cannot be opened or read."""


class TruncatedHeaderError(HdreIOError):
    """Raised when the file ends before the fixed-size header block."""


class UnsupportedFormatError(DecodeError):
    """Raised when the payload is not a Float32Array export."""


class UnsupportedVersionError(DecodeError):
    """Raised for format versions below 2.0."""


class TruncatedPayloadError(DecodeError):
    """Raised when fewer payload floats are stored than the header implies."""

    def __init__(self, message: str, expected: int, available: int,
                 path: Optional[str] = None):
        """Record expected and available float counts for diagnostics."""
        super().__init__(message, path=path)
        self.expected = expected
        self.available = available


class MalformedHeaderError(DecodeError):
    """Raised when header fields are inconsistent with a square cubemap."""


class AssetReleasedError(RuntimeError):
    """Raised when an accessor is used after ``HdreAsset.release()``."""
