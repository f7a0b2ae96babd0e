"""Durable local key-value storage.

One UTF-8 file per key under a base directory. Writes go to a temp
file first and are moved into place with ``os.replace`` so a crash
never leaves a half-written value behind.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import structlog

logger = structlog.get_logger()

_KEY_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


class LocalStorage:
    """String-keyed store backed by files in ``base_dir``."""

    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._base_dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key was never written."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("storage_read_failed", key=key, path=str(path), error=str(exc))
            return None

    def set_item(self, key: str, value: str) -> None:
        """Replace the value of ``key`` atomically."""
        path = self._path(key)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".json.tmp")
        temp_path.write_text(value, encoding="utf-8")
        os.replace(temp_path, path)
        logger.debug("storage_item_written", key=key, size=len(value))

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        logger.debug("storage_item_removed", key=key)
