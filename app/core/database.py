from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, AsyncGenerator, Dict

from fastapi.concurrency import run_in_threadpool

from .config import settings

logger = logging.getLogger(__name__)


def _empty_data() -> Dict[str, Any]:
    return {"roles": {}, "jds": {}}


class JsonDataStore:
    """
    Key-value store for roles and job descriptions, persisted as one JSON file.

    `read()` returns the whole document (an empty structure when the file does
    not exist yet); `write()` replaces it. Writers are serialized by `lock`;
    callers doing read-modify-write should hold it across both calls.
    """

    def __init__(self, path: str):
        self.path = path
        self.lock = asyncio.Lock()

    def _read_sync(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            logger.info(f"Data file {self.path} not found, initializing with default structure.")
            return _empty_data()
        except (OSError, json.JSONDecodeError) as e:
            raise RuntimeError(f"Could not read data file: {e}") from e
        data.setdefault("roles", {})
        data.setdefault("jds", {})
        return data

    def _write_sync(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise RuntimeError(f"Could not write data file: {e}") from e

    async def read(self) -> Dict[str, Any]:
        return await run_in_threadpool(self._read_sync)

    async def write(self, data: Dict[str, Any]) -> None:
        await run_in_threadpool(self._write_sync, data)


# Globals populated during startup
_data_store: JsonDataStore | None = None


async def init_db(app=None, path: str | None = None) -> None:
    """Create the data store and make sure the upload directory exists."""
    global _data_store
    _data_store = JsonDataStore(path or settings.DATA_FILE_PATH)
    os.makedirs(settings.JD_UPLOAD_DIR, exist_ok=True)
    logger.info(f"Data store ready at {_data_store.path}")


async def close_db() -> None:
    global _data_store
    _data_store = None


async def get_db_session() -> AsyncGenerator[JsonDataStore, None]:
    """FastAPI dependency: yields the data store (initializing it on first use)."""
    if _data_store is None:
        await init_db()
    yield _data_store
