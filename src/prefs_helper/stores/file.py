"""JsonFilePreferences — synchronous flat-file store with a resident snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from prefs_helper.stores.base import PRIMITIVE_TYPES
from prefs_helper.stores.memory import InMemoryPreferences

logger = logging.getLogger(__name__)


class JsonFilePreferences(InMemoryPreferences):
    """Preferences persisted as a single JSON object on disk.

    The file is read once on construction.  Reads are always served from
    memory.  ``apply()`` hands the new snapshot to a single background
    writer thread; ``commit()`` writes it before returning.  Each write
    replaces the whole file atomically, and a snapshot older than the one
    already on disk is never written.

    Parameters:
        path: Location of the JSON file.  Parent directories are created
              on first write.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        super().__init__(self._load(self._path))
        self._disk_lock = threading.Lock()
        self._written_generation = 0
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prefs-writer")

    @property
    def path(self) -> Path:
        return self._path

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read preferences file %s, starting empty: %s", path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Preferences file %s does not hold an object, starting empty", path)
            return {}
        data = {}
        for key, value in raw.items():
            if isinstance(value, PRIMITIVE_TYPES):
                data[key] = value
            else:
                logger.warning("Dropping unsupported value for key %r in %s", key, path)
        return data

    # ── persistence ──────────────────────────────────────────

    def _persist(self, snapshot: dict[str, Any], generation: int, *, blocking: bool) -> bool:
        if blocking:
            return self._write_file(snapshot, generation)
        self._writer.submit(self._write_file, snapshot, generation)
        return True

    def _write_file(self, snapshot: dict[str, Any], generation: int) -> bool:
        with self._disk_lock:
            if generation < self._written_generation:
                return True
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        json.dump(snapshot, fh, sort_keys=True)
                    os.replace(tmp, self._path)
                except BaseException:
                    Path(tmp).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                logger.warning("Could not write preferences file %s: %s", self._path, exc)
                return False
            self._written_generation = generation
            return True

    def flush(self) -> None:
        """Block until every pending background write has finished."""
        self._writer.submit(lambda: None).result()

    def close(self) -> None:
        self._writer.shutdown(wait=True)
