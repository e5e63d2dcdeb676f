"""Persisted registry of bins waiting for pickup."""

from __future__ import annotations

import json
import logging
from typing import Callable

from ...errors import PersistenceFailed, StorageCorrupt
from ...models.domain import BinRecord
from ...persistence.store import KeyValueStore
from .ledger import CapacityLedger

logger = logging.getLogger(__name__)

MutationListener = Callable[[], None]


class BinRegistry:
    """Owns the pending bin set for one front end and keeps it in the shared store.

    Each front end holds its own registry; instances only see each other's
    changes through ``load``. Writes replace the whole stored list, so two
    writers race last-write-wins.
    """

    def __init__(self, store: KeyValueStore, ledger: CapacityLedger, key: str = "fullBins") -> None:
        self.store = store
        self.ledger = ledger
        self.key = key
        self.storage_issue: StorageCorrupt | None = None
        self._bins: list[BinRecord] = []
        self._listeners: list[MutationListener] = []

    def subscribe(self, listener: MutationListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    def _replace(self, records: list[BinRecord]) -> None:
        self._bins = records
        self.ledger.recompute(self._bins)
        self._notify()

    def load(self) -> list[BinRecord]:
        """Read the persisted set. Unreadable data yields an empty set and sets ``storage_issue``."""
        self.storage_issue = None
        try:
            raw = self.store.get(self.key)
        except Exception as exc:
            return self._load_failed(f"Store read failed: {exc}")

        if raw is None:
            self._replace([])
            return []

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise TypeError(f"Expected a list of bins, got {type(payload).__name__}.")
            records = [BinRecord.from_storage(item) for item in payload]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            return self._load_failed(f"Stored bins could not be parsed: {exc}")

        ids = [record.id for record in records]
        if len(ids) != len(set(ids)):
            return self._load_failed("Stored bins contain duplicate ids.")

        self._replace(records)
        logger.debug(f"Loaded {len(records)} bins from '{self.key}'")
        return list(records)

    def _load_failed(self, detail: str) -> list[BinRecord]:
        logger.warning(f"Could not load bins from '{self.key}', starting empty: {detail}")
        self.storage_issue = StorageCorrupt(detail=detail)
        self._replace([])
        return []

    def add(self, record: BinRecord) -> None:
        """Append ``record`` and persist the full set.

        Raises ``AdmissionRejected`` without touching state when the record does
        not fit. Raises ``PersistenceFailed`` when the store write fails; the
        record stays in memory in that case.
        """
        self.ledger.try_admit(record.amount).raise_if_rejected()
        if any(existing.id == record.id for existing in self._bins):
            raise ValueError(f"Bin '{record.id}' is already registered.")

        self._replace([*self._bins, record])
        try:
            self._persist()
        except Exception as exc:
            logger.warning(f"Failed to persist bins after adding '{record.id}': {exc}")
            raise PersistenceFailed(f"Could not save bins: {exc}") from exc

    def clear(self) -> None:
        self._replace([])
        try:
            self.store.delete(self.key)
        except Exception as exc:
            logger.warning(f"Failed to delete stored bins under '{self.key}': {exc}")

    def list(self) -> tuple[BinRecord, ...]:
        return tuple(self._bins)

    def __len__(self) -> int:
        return len(self._bins)

    def _persist(self) -> None:
        payload = [record.to_storage() for record in self._bins]
        self.store.set(self.key, json.dumps(payload, ensure_ascii=False))
