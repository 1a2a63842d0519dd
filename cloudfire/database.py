"""Persistent store: SQLite schema, connection management and async execution."""

import asyncio
import contextvars
import functools
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generator, Optional, TypeVar

from common.constants import STORE_VERSION
from common.logging_config import get_logger
from cloudfire.config import DATABASE_PATH, DB_TIMEOUT
from cloudfire.exceptions import StoreUnavailableError

logger = get_logger(__name__)

T = TypeVar("T")

_initialized_path: Optional[str] = None
_init_task: Optional["asyncio.Task[None]"] = None


def _create_collections(cursor: sqlite3.Cursor) -> None:
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            email TEXT NOT NULL DEFAULT '',
            role TEXT NOT NULL,
            plan TEXT NOT NULL,
            storage_used INTEGER NOT NULL DEFAULT 0,
            storage_limit INTEGER NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            api_key TEXT UNIQUE,
            created_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS files (
            file_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            size INTEGER NOT NULL,
            file_type TEXT NOT NULL,
            parent_id TEXT NOT NULL,
            owner_id TEXT NOT NULL,
            mime_type TEXT NOT NULL,
            storage_key TEXT NOT NULL,
            content BLOB,
            created_at TEXT NOT NULL,
            is_shared INTEGER NOT NULL DEFAULT 0,
            share_token TEXT,
            share_created_at TEXT,
            is_trashed INTEGER NOT NULL DEFAULT 0,
            trashed_at TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS folders (
            folder_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            parent_id TEXT NOT NULL,
            owner_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            is_trashed INTEGER NOT NULL DEFAULT 0,
            trashed_at TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)


def _create_indexes(cursor: sqlite3.Cursor) -> None:
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_files_parent ON files(parent_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_files_owner ON files(owner_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_folders_parent ON folders(parent_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_folders_owner ON folders(owner_id)")


def _migrate_to_v2(cursor: sqlite3.Cursor) -> None:
    """
    Version 2 added the share token index.
    """
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_files_share_token ON files(share_token)")


def init_database() -> None:
    """
    Initialize database, create collections and bring the schema to STORE_VERSION.
    """
    db_path = Path(DATABASE_PATH)
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create database directory {db_path.parent}: {e}", exc_info=True)
        raise StoreUnavailableError("Storage is unavailable") from e

    with get_db_connection() as conn:
        try:
            cursor = conn.cursor()
            cursor.execute("PRAGMA user_version")
            current_version = cursor.fetchone()[0]

            if current_version > STORE_VERSION:
                raise StoreUnavailableError(
                    f"Store version {current_version} is newer than supported version {STORE_VERSION}"
                )

            _create_collections(cursor)
            _create_indexes(cursor)

            if current_version < 2:
                _migrate_to_v2(cursor)

            if current_version != STORE_VERSION:
                cursor.execute(f"PRAGMA user_version = {STORE_VERSION}")
                logger.info(f"Store schema upgraded from version {current_version} to {STORE_VERSION}")

            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize store at {DATABASE_PATH}: {e}", exc_info=True)
            raise StoreUnavailableError("Storage is unavailable") from e


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    try:
        conn = sqlite3.connect(DATABASE_PATH, timeout=DB_TIMEOUT)
    except sqlite3.Error as e:
        logger.error(f"Cannot open store at {DATABASE_PATH}: {e}", exc_info=True)
        raise StoreUnavailableError("Storage is unavailable") from e

    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()



def _execute(operation: Callable[[sqlite3.Connection], T], immediate: bool) -> T:
    with get_db_connection() as conn:
        try:
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
            result = operation(conn)
            conn.commit()
            return result
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Store operation failed: {e}", exc_info=True)
            raise StoreUnavailableError("Storage operation failed") from e
        except Exception:
            conn.rollback()
            raise


async def _open_store(path: str) -> None:
    global _initialized_path

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, init_database)
    _initialized_path = path
    logger.info(f"Store opened: {path} [version={STORE_VERSION}]")


async def initialize_store() -> None:
    """
    Open the store once per process.

    Concurrent callers await the same in-flight initialization. A failed
    attempt is retried by the next caller, and pointing DATABASE_PATH at a
    different file opens that file.
    """
    global _init_task

    if _initialized_path == DATABASE_PATH:
        return

    loop = asyncio.get_running_loop()
    if _init_task is None or _init_task.done() or _init_task.get_loop() is not loop:
        _init_task = loop.create_task(_open_store(DATABASE_PATH))

    await asyncio.shield(_init_task)


async def run_in_store(
    operation: Callable[[sqlite3.Connection], T],
    immediate: bool = False,
) -> T:
    """
    Run a single collection operation in its own transaction.

    The blocking SQLite work happens in the default executor so the caller's
    event loop keeps serving other requests. The caller's context (and with
    it the request id used by logging) travels with the work.

    Args:
        operation: Callable receiving an open connection
        immediate: Take the write lock up front (read-then-write operations)

    Returns:
        Whatever the operation returns

    Raises:
        StoreUnavailableError: Store could not be opened or the operation failed
        sqlite3.IntegrityError: Uniqueness violation, for the caller to translate
    """
    await initialize_store()
    loop = asyncio.get_running_loop()
    context = contextvars.copy_context()
    return await loop.run_in_executor(None, context.run, functools.partial(_execute, operation, immediate))


async def ping_store() -> bool:
    """
    Readiness probe: True when the store answers a trivial query.
    """
    try:
        return await run_in_store(lambda conn: conn.execute("SELECT 1").fetchone()[0] == 1)
    except StoreUnavailableError:
        return False
