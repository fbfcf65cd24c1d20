"""Local persisted copy of the last fetched template and roster snapshots."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any


class SnapshotCache:
    """JSON documents keyed by store name under one directory.

    A restored snapshot only bridges the gap until the next fetch completes;
    the fetch result always overwrites it.
    """

    def __init__(self, directory: str | os.PathLike[str] | None, logger: logging.Logger):
        self.directory = Path(directory) if directory else None
        self.logger = logger

    @property
    def enabled(self) -> bool:
        return self.directory is not None

    def load(self, key: str) -> dict[str, Any] | None:
        if self.directory is None:
            return None
        path = self.directory / f"{key}.json"
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            self.logger.warning("Ignoring unreadable snapshot %s.", path, exc_info=True)
            return None
        if not isinstance(payload, dict):
            self.logger.warning("Ignoring malformed snapshot %s.", path)
            return None
        return payload

    def save(self, key: str, payload: dict[str, Any]) -> None:
        if self.directory is None:
            return
        path = self.directory / f"{key}.json"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(json.dumps(payload, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError:
            self.logger.warning("Could not persist snapshot %s.", path, exc_info=True)
