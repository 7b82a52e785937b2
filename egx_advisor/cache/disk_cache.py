"""JSON-file cache with a freshness window and a stale-read escape hatch.

Every entry lives in ``<cache_dir>/<key>.json`` as ``{"payload": ..., "written_at": ms}``,
with the key percent-encoded.
Failures never leave this module: a broken read is a miss, a broken write is a no-op.
"""

import json
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import quote

import structlog

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 24 * 60 * 60


def build_key(kind: str, symbol: str, *parts: object) -> str:
    """Compose a cache key such as ``price_COMI`` or ``historical_COMI_252``."""
    return "_".join([kind, symbol, *(str(p) for p in parts)])


class DiskCache:
    def __init__(
        self,
        cache_dir: str | Path,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._dir = Path(cache_dir)
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._dir

    def get(self, key: str) -> Any | None:
        """Return the payload if it was written within the freshness window."""
        entry = self._read(key)
        if entry is None:
            return None

        age_ms = self._now_ms() - entry["written_at"]
        if age_ms < self._ttl_ms:
            logger.debug("cache_hit", key=key, age_minutes=round(age_ms / 60_000))
            return entry["payload"]

        logger.debug("cache_expired", key=key)
        return None

    def get_stale(self, key: str) -> Any | None:
        """Return the payload whatever its age."""
        entry = self._read(key)
        if entry is None:
            return None
        logger.info("cache_stale_used", key=key, written_at=entry["written_at"])
        return entry["payload"]

    def set(self, key: str, payload: Any) -> None:
        path = self._path(key)
        entry = {"payload": payload, "written_at": self._now_ms()}
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entry, indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("cache_write_error", key=key, error=str(exc))
            return
        logger.debug("cache_saved", key=key)

    def clear(self) -> int:
        """Delete every entry. Returns the number of files removed."""
        if not self._dir.exists():
            return 0

        removed = 0
        try:
            files = [p for p in self._dir.iterdir() if p.is_file()]
        except OSError as exc:
            logger.error("cache_clear_error", error=str(exc))
            return 0

        for path in files:
            try:
                path.unlink()
                removed += 1
            except OSError as exc:
                logger.error("cache_delete_error", path=str(path), error=str(exc))

        logger.info("cache_cleared", removed=removed)
        return removed

    def _read(self, key: str) -> dict | None:
        path = self._path(key)
        try:
            if not path.exists():
                return None
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("cache_read_error", key=key, error=str(exc))
            return None

        if not isinstance(entry, dict) or "payload" not in entry:
            logger.error("cache_entry_malformed", key=key)
            return None
        if not isinstance(entry.get("written_at"), int | float):
            logger.error("cache_entry_malformed", key=key)
            return None
        return entry

    def _path(self, key: str) -> Path:
        # Percent-encoding keeps distinct keys in distinct files inside the directory.
        return self._dir / f"{quote(key, safe='')}.json"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
