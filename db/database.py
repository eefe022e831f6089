"""Asynchronous key/record storage on top of SQLite.

The store knows nothing about texts or lines. It persists JSON records in the
tables listed in ``TABLE_KEYS`` and hands them back with their key field set.
Every failure of the underlying driver surfaces as ``StorageUnavailable``.
"""

import asyncio
import json
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiosqlite
from loguru import logger

from config import get_config_value
from errors import InvalidArgument, StorageUnavailable
from .schema import SCHEMA_SQL, SCHEMA_VERSION, TABLE_KEYS

MEMORY_PATH = ":memory:"


@asynccontextmanager
async def storage_errors(operation: str):
    """Translate driver errors raised inside the block into StorageUnavailable."""
    try:
        yield
    except (aiosqlite.Error, sqlite3.Error, OSError, ValueError) as exc:
        # aiosqlite raises ValueError when the connection has been closed
        raise StorageUnavailable(f"{operation} failed: {exc}") from exc


def _key_field(table: str) -> str:
    try:
        return TABLE_KEYS[table]
    except KeyError:
        raise InvalidArgument(f"Unknown table: {table}") from None


class Store:
    """Process-wide record store. Opened lazily on first use."""

    def __init__(self, db_path: Path | str = MEMORY_PATH) -> None:
        self.db_path = str(db_path)
        self._conn: Optional[aiosqlite.Connection] = None
        self._open_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> aiosqlite.Connection:
        """Open the connection and ensure the schema. Safe to call repeatedly."""
        if self._conn is not None:
            return self._conn
        async with self._open_lock:
            if self._conn is not None:
                return self._conn
            async with storage_errors("open"):
                if self.db_path != MEMORY_PATH:
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                conn = await aiosqlite.connect(self.db_path)
                try:
                    await conn.executescript(SCHEMA_SQL)
                    await conn.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")
                    await conn.commit()
                except BaseException:
                    await conn.close()
                    raise
            self._conn = conn
            logger.info(f"Store opened at {self.db_path} (schema v{SCHEMA_VERSION})")
            return conn

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        async with storage_errors("close"):
            await conn.close()

    async def get_schema_version(self) -> int:
        conn = await self.open()
        async with storage_errors("get_schema_version"):
            async with conn.execute("PRAGMA user_version") as cursor:
                row = await cursor.fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def _decode(table: str, key: Any, payload: str) -> Dict[str, Any]:
        record = json.loads(payload)
        record[_key_field(table)] = key
        return record

    async def get_all(self, table: str) -> List[Dict[str, Any]]:
        """Return every record of a table ordered by key."""
        key_field = _key_field(table)
        conn = await self.open()
        async with storage_errors(f"get_all({table})"):
            async with conn.execute(
                f"SELECT {key_field}, record FROM {table} ORDER BY {key_field}"
            ) as cursor:
                rows = await cursor.fetchall()
        return [self._decode(table, row[0], row[1]) for row in rows]

    async def get_one(self, table: str, key: Any) -> Optional[Dict[str, Any]]:
        """Return the record stored under key, or None."""
        key_field = _key_field(table)
        conn = await self.open()
        async with storage_errors(f"get_one({table})"):
            async with conn.execute(
                f"SELECT {key_field}, record FROM {table} WHERE {key_field} = ?",
                (key,),
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return None
        return self._decode(table, row[0], row[1])

    async def insert(self, table: str, record: Dict[str, Any]) -> int:
        """Insert a record under a freshly generated integer key and return it."""
        if table != "texts":
            raise InvalidArgument(f"Table {table} has no generated keys")
        key_field = _key_field(table)
        body = {k: v for k, v in record.items() if k != key_field}
        conn = await self.open()
        async with self._write_lock:
            async with storage_errors(f"insert({table})"):
                cursor = await conn.execute(
                    f"INSERT INTO {table} (record) VALUES (?)",
                    (json.dumps(body),),
                )
                new_id = cursor.lastrowid
                await cursor.close()
                await conn.commit()
        return int(new_id)

    async def upsert(self, table: str, record: Dict[str, Any]) -> Any:
        """Insert or replace the record keyed by its own key field."""
        key_field = _key_field(table)
        key = record.get(key_field)
        if key is None:
            raise InvalidArgument(f"Record for {table} is missing '{key_field}'")
        body = {k: v for k, v in record.items() if k != key_field}
        conn = await self.open()
        async with self._write_lock:
            async with storage_errors(f"upsert({table})"):
                await conn.execute(
                    f"""
                    INSERT INTO {table} ({key_field}, record) VALUES (?, ?)
                    ON CONFLICT({key_field}) DO UPDATE SET record = excluded.record
                    """,
                    (key, json.dumps(body)),
                )
                await conn.commit()
        return key

    async def delete(self, table: str, key: Any) -> None:
        key_field = _key_field(table)
        conn = await self.open()
        async with self._write_lock:
            async with storage_errors(f"delete({table})"):
                await conn.execute(f"DELETE FROM {table} WHERE {key_field} = ?", (key,))
                await conn.commit()


_store: Optional[Store] = None


def get_store() -> Store:
    """Return the process-wide store, creating it from config on first call."""
    global _store
    if _store is None:
        _store = Store(get_config_value("storage", "db_path"))
    return _store


def set_store(store: Optional[Store]) -> None:
    """Replace the process-wide store (used by tests and the --init flag)."""
    global _store
    _store = store


async def init_db() -> Store:
    """Open the configured store, creating tables if they don't exist."""
    store = get_store()
    await store.open()
    return store
