"""
Persistence for FundLedger: a SQLite store with a JSON file fallback
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from config import DB_FILENAME, DB_TABLE, STORAGE_KEY, dumps_state, get_default_state, loads_state
from ledger_engine import LedgerEngine
from utils import app_dir

logger = logging.getLogger(__name__)


class RecordMissing(LookupError):
    """Raised by a store when the key has no record"""


class MemoryStore:
    """Key/value records kept in a dict; nothing survives the process"""

    def __init__(self):
        self._records: Dict[str, str] = {}

    def get(self, key: str) -> str:
        if key not in self._records:
            raise RecordMissing(key)
        return self._records[key]

    def put(self, key: str, value: str) -> None:
        self._records[key] = value

    def delete(self, key: str) -> None:
        self._records.pop(key, None)


class SqliteStore:
    """
    Key/value records in a single SQLite table (name PRIMARY KEY, value).
    The table is created on first use, so a database that cannot be opened
    fails the call that touches it rather than the constructor.
    """

    def __init__(self, engine: Engine, table: str = DB_TABLE):
        self.engine = engine
        self.table = table
        self._schema_ready = False

    @classmethod
    def from_path(cls, path: str, table: str = DB_TABLE) -> "SqliteStore":
        return cls(create_engine(f"sqlite:///{path}", future=True), table)

    def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self.table} (
                        name TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
            )
        self._schema_ready = True

    def get(self, key: str) -> str:
        self.ensure_schema()
        with self.engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT value FROM {self.table} WHERE name = :name"),
                {"name": key},
            ).first()
        if row is None:
            raise RecordMissing(key)
        return row[0]

    def put(self, key: str, value: str) -> None:
        self.ensure_schema()
        with self.engine.begin() as conn:
            conn.execute(
                text(f"INSERT OR REPLACE INTO {self.table} (name, value) VALUES (:name, :value)"),
                {"name": key, "value": value},
            )

    def delete(self, key: str) -> None:
        self.ensure_schema()
        with self.engine.begin() as conn:
            conn.execute(text(f"DELETE FROM {self.table} WHERE name = :name"), {"name": key})


class JsonFileStore:
    """One JSON file per key in a directory"""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> str:
        try:
            with open(self._path(key), "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise RecordMissing(key) from None
        return data["value"]

    def put(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump({"name": key, "value": value}, f, ensure_ascii=False)
        os.replace(tmp, path)

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


class PersistOutcome(Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadResult:
    outcome: PersistOutcome
    value: Optional[str] = None


class PersistenceAdapter:
    """
    Two-tier store. Every call tries the primary store first and falls back to
    the secondary one on any failure, including a missing record on load.
    Errors are logged, never raised.

    A record in the secondary store is always newer than the primary one:
    it is only written when a primary save fails, and a later successful
    primary save deletes it. Load therefore prefers it when both exist, which
    also holds across restarts.
    """

    def __init__(self, primary, secondary):
        self.primary = primary
        self.secondary = secondary

    def load(self, key: str) -> LoadResult:
        primary_value = self._try_get(self.primary, key, "primary")
        fallback_value = self._try_get(self.secondary, key, "secondary")
        if fallback_value is not None:
            if primary_value is not None and primary_value != fallback_value:
                logger.warning("fallback store holds a newer record for %r than the primary", key)
            return LoadResult(PersistOutcome.FALLBACK, fallback_value)
        if primary_value is not None:
            return LoadResult(PersistOutcome.PRIMARY, primary_value)
        return LoadResult(PersistOutcome.FAILED)

    def save(self, key: str, value: str) -> PersistOutcome:
        try:
            self.primary.put(key, value)
        except Exception as ex:
            logger.warning("primary store save failed for %r, using fallback: %s", key, ex)
        else:
            self._drop_fallback_copy(key)
            return PersistOutcome.PRIMARY
        try:
            self.secondary.put(key, value)
            return PersistOutcome.FALLBACK
        except Exception as ex:
            logger.error("fallback store save failed for %r: %s", key, ex)
            return PersistOutcome.FAILED

    def remove(self, key: str) -> PersistOutcome:
        outcome = PersistOutcome.FAILED
        try:
            self.primary.delete(key)
            outcome = PersistOutcome.PRIMARY
        except Exception as ex:
            logger.warning("primary store remove failed for %r: %s", key, ex)
        try:
            self.secondary.delete(key)
            if outcome is PersistOutcome.FAILED:
                outcome = PersistOutcome.FALLBACK
        except Exception as ex:
            logger.warning("fallback store remove failed for %r: %s", key, ex)
        return outcome

    def _drop_fallback_copy(self, key: str) -> None:
        try:
            self.secondary.delete(key)
        except Exception as ex:
            # the stale copy would shadow this save on the next load
            logger.error("could not clear fallback record for %r: %s", key, ex)

    @staticmethod
    def _try_get(store, key: str, name: str) -> Optional[str]:
        try:
            return store.get(key)
        except RecordMissing:
            logger.debug("%s store has no record for %r", name, key)
        except Exception as ex:
            logger.warning("%s store load failed for %r: %s", name, key, ex)
        return None


def default_adapter(directory: Optional[str] = None) -> PersistenceAdapter:
    """Adapter over the app data directory: SQLite database first, JSON file second"""
    base = directory or app_dir()
    return PersistenceAdapter(
        SqliteStore.from_path(os.path.join(base, DB_FILENAME)),
        JsonFileStore(base),
    )


def restore_engine(adapter: PersistenceAdapter, key: str = STORAGE_KEY) -> LedgerEngine:
    """Build an engine from stored state, or from a fresh state if nothing usable is stored"""
    result = adapter.load(key)
    if result.value is None:
        return LedgerEngine(get_default_state())
    try:
        state = loads_state(result.value)
    except (ValueError, TypeError, KeyError, AttributeError) as ex:
        logger.error("stored ledger under %r is unreadable, starting fresh: %s", key, ex)
        return LedgerEngine(get_default_state())
    logger.info("ledger restored from %s store (%d entries)", result.outcome.value, len(state.history))
    return LedgerEngine(state)


def attach_autosave(engine: LedgerEngine, adapter: PersistenceAdapter, key: str = STORAGE_KEY) -> None:
    """Mirror engine state to storage after every change"""
    def _save(eng: LedgerEngine) -> None:
        adapter.save(key, dumps_state(eng.state))

    engine.subscribe(_save)
