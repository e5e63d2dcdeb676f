"""Key-value storage backends shared by the client and driver front ends."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import MissingCredentialError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore(Protocol):
    """Synchronous string store; a missing key reads as ``None``."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class FileKeyValueStore:
    """Stores each key as a JSON document under ``<data_root>/store``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.store_root = self.root / "store"
        self.store_root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.store_root / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # temp file + os.replace: readers only ever see a complete document
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


class SupabaseKeyValueStore:
    """Stores keys as rows of a Supabase table with ``key``/``value`` columns."""

    def __init__(self, client=None, table: str | None = None) -> None:
        self.client = client or get_supabase_client()
        if self.client is None:
            raise MissingCredentialError("supabase_key", "Supabase storage")
        self.table = table or settings.supabase_table

    def get(self, key: str) -> str | None:
        response = self.client.table(self.table).select("value").eq("key", key).limit(1).execute()
        rows = response.data or []
        if not rows:
            return None
        return rows[0].get("value")

    def set(self, key: str, value: str) -> None:
        self.client.table(self.table).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        ).execute()

    def delete(self, key: str) -> None:
        self.client.table(self.table).delete().eq("key", key).execute()


def get_store() -> KeyValueStore:
    """Build the store selected by ``BINROUTE_STORE_BACKEND``."""
    if settings.store_backend == "supabase":
        logger.info(f"Using Supabase table '{settings.supabase_table}' for bin storage")
        return SupabaseKeyValueStore()
    logger.info(f"Using file storage under {settings.data_root} for bin storage")
    return FileKeyValueStore()
