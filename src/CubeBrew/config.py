"""Settings for decoding and caching HDRE files.

`CubeBrewConfig` is read from and written to YAML. Every section is a plain
dataclass holding bool, int or str values, so loading is a key-by-key copy
with a type check per value.
"""

import dataclasses
import logging
import os
import tempfile
from dataclasses import dataclass, field

import yaml

from .core.pyramid import N_LEVELS

logger = logging.getLogger("cubebrew.config")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
# Header width is a 16-bit field, so level 16 and beyond are always empty.
MAX_LEVELS = 16
MAX_WORKERS = 128


@dataclass
class DecoderConfig:
    """Binary decoder options."""

    num_levels: int = N_LEVELS
    strict_signature: bool = False


@dataclass
class RegistryConfig:
    """Asset registry options."""

    max_workers: int = 4
    show_progress: bool = True


@dataclass
class CubeBrewConfig:
    """Top-level settings: logging plus the decoder and registry sections."""

    log_level: str = "INFO"
    log_file: str = ""

    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "CubeBrewConfig":
        """Load ``path`` over the defaults; a missing file yields the defaults.

        Raises:
            ValueError: the file is not a YAML mapping, or the merged
                settings fail ``validate()``.

        """
        config = cls()
        if os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ValueError(f"Cannot parse config '{path}': {exc}") from exc
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ValueError(
                    f"Config '{path}' must be a YAML mapping, "
                    f"got {type(data).__name__}"
                )
            _apply_section(config, data)
        else:
            logger.info("Config file '%s' not found; using defaults.", path)

        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc
        return config

    def to_yaml(self, path: str):
        """Write the settings to ``path``, replacing it in one step."""
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".cubebrew_", suffix=".yaml",
                                        dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(dataclasses.asdict(self), f, sort_keys=False)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def validate(self):
        """Check every setting and raise one ValueError listing all problems."""
        problems = []
        if self.log_level.upper() not in LOG_LEVELS:
            problems.append(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, "
                f"got '{self.log_level}'"
            )
        if not 1 <= self.decoder.num_levels <= MAX_LEVELS:
            problems.append(
                f"decoder.num_levels must be in 1..{MAX_LEVELS}, "
                f"got {self.decoder.num_levels}"
            )
        if not 1 <= self.registry.max_workers <= MAX_WORKERS:
            problems.append(
                f"registry.max_workers must be in 1..{MAX_WORKERS}, "
                f"got {self.registry.max_workers}"
            )
        if problems:
            raise ValueError("Invalid configuration:\n  - " + "\n  - ".join(problems))


def _coerce(value, kind):
    """Return ``value`` as ``kind`` (bool, int or str), or None when it does not fit."""
    if kind is bool:
        return value if isinstance(value, bool) else None
    if kind is int:
        # bool subclasses int; `max_workers: true` is a mistake, not 1.
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return None
    if kind is str:
        return value if isinstance(value, str) else None
    return None


def _apply_section(section, data: dict, prefix: str = ""):
    """Copy the known keys of ``data`` onto ``section``, warning about the rest."""
    known = {f.name for f in dataclasses.fields(section)}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if key not in known:
            logger.warning("Unknown config key ignored: '%s'", name)
            continue

        current = getattr(section, key)
        if dataclasses.is_dataclass(current):
            if isinstance(value, dict):
                _apply_section(current, value, f"{name}.")
            else:
                logger.warning("Config section '%s' must be a mapping; ignored.", name)
            continue

        coerced = _coerce(value, type(current))
        if coerced is None:
            logger.warning(
                "Config key '%s' expects %s, got %r; keeping %r.",
                name, type(current).__name__, value, current,
            )
            continue
        setattr(section, key, coerced)
