"""Thread-safe, path-keyed memoization of decoded HDRE assets."""

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, Optional

from tqdm import tqdm

from .asset import HdreAsset, load_hdre
from .config import CubeBrewConfig, DecoderConfig
from .core import DecodeError

logger = logging.getLogger("cubebrew.registry")

Loader = Callable[[str, DecoderConfig], HdreAsset]


def registry_key(path) -> str:
    """Canonical cache key so equivalent spellings of a path share one entry."""
    return os.path.normcase(os.path.abspath(os.fspath(path)))


class AssetRegistry:
    """Single-flight cache of decoded assets.

    Concurrent ``get()`` calls for the same path decode once; the other
    callers wait on the in-flight future. Failed decodes are not cached.
    """

    def __init__(self, config: Optional[CubeBrewConfig] = None,
                 loader: Loader = load_hdre):
        """Create an empty registry using ``loader`` to decode misses."""
        self.config = config or CubeBrewConfig()
        self._loader = loader
        self._assets: Dict[str, HdreAsset] = {}
        self._inflight: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def __contains__(self, path) -> bool:
        with self._lock:
            return registry_key(path) in self._assets

    def __len__(self) -> int:
        with self._lock:
            return len(self._assets)

    def find(self, path) -> Optional[HdreAsset]:
        """Return the cached asset for ``path`` without decoding."""
        with self._lock:
            return self._assets.get(registry_key(path))

    def get(self, path) -> HdreAsset:
        """Return the asset for ``path``, decoding it on first request.

        Raises the loader's ``DecodeError`` (``HdreIOError`` for missing
        files); the failure is not remembered, so a later call retries.
        """
        key = registry_key(path)
        with self._lock:
            asset = self._assets.get(key)
            if asset is not None:
                logger.debug("Registry hit: %s", key)
                return asset
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            logger.debug("Waiting on in-flight decode: %s", key)
            return future.result()

        try:
            asset = self._loader(os.fspath(path), self.config.decoder)
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._assets[key] = asset
            self._inflight.pop(key, None)
        future.set_result(asset)
        logger.debug("Registered %s", key)
        return asset

    def preload(self, paths: Iterable, max_workers: Optional[int] = None
                ) -> Dict[str, DecodeError]:
        """Decode many paths in parallel; return failures keyed by path."""
        paths = list(dict.fromkeys(os.fspath(p) for p in paths))
        workers = max_workers or self.config.registry.max_workers
        workers = max(1, min(workers, len(paths) or 1))
        failures: Dict[str, DecodeError] = {}

        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = {executor.submit(self.get, p): p for p in paths}
            with tqdm(total=len(futures), desc="Loading HDRE",
                      disable=not self.config.registry.show_progress) as pbar:
                for future in as_completed(futures):
                    path = futures[future]
                    try:
                        future.result()
                    except DecodeError as exc:
                        logger.error("Failed to load %s: %s", path, exc)
                        failures[path] = exc
                    pbar.update(1)
        finally:
            executor.shutdown(wait=True)

        logger.info(
            "Preloaded %d/%d HDRE assets", len(paths) - len(failures), len(paths)
        )
        return failures

    def release(self, path) -> bool:
        """Drop and release one cached asset. Returns False if absent."""
        with self._lock:
            asset = self._assets.pop(registry_key(path), None)
        if asset is None:
            return False
        asset.release()
        return True

    def clear(self) -> None:
        """Release every cached asset."""
        with self._lock:
            assets = list(self._assets.values())
            self._assets.clear()
        for asset in assets:
            asset.release()
        logger.debug("Registry cleared (%d assets released)", len(assets))
