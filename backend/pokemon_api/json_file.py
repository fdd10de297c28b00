# backend/pokemon_api/json_file.py

import asyncio
import json
import logging
import os
import tempfile
from typing import Any, List

from .errors import StorageError

logger = logging.getLogger(__name__)

class JsonListFile:
    """A JSON file holding a single top-level list.

    Reads happen once, when the owning store is built. Writes rewrite the
    whole file atomically from a worker thread so the event loop keeps serving
    other requests. Callers serialize writes themselves (see the stores' locks).
    """

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[Any]:
        """Reads the list from disk. A missing file is an empty list."""
        if not os.path.exists(self.path):
            logger.info(f"{self.path} does not exist yet, starting with an empty list.")
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"{self.path} must contain a JSON list, got {type(data).__name__}")
        logger.info(f"Loaded {len(data)} entries from {self.path}")
        return data

    def _write(self, items: List[Any]) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def save(self, items: List[Any]) -> None:
        """Rewrites the whole file with `items`."""
        try:
            await asyncio.to_thread(self._write, items)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
        logger.debug(f"Wrote {len(items)} entries to {self.path}")
