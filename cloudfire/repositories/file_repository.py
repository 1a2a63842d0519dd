"""File repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from common.logging_config import get_logger
from common.types import FileType
from cloudfire.database import run_in_store

logger = get_logger(__name__)

_FILE_COLUMNS = """file_id, name, size, file_type, parent_id, owner_id, mime_type, storage_key,
                   created_at, is_shared, share_token, share_created_at, is_trashed, trashed_at"""


@dataclass
class CloudFile:
    file_id: str
    name: str
    size: int
    file_type: FileType
    parent_id: str
    owner_id: str
    mime_type: str
    storage_key: str
    created_at: datetime
    is_shared: bool = False
    share_token: Optional[str] = None
    share_created_at: Optional[datetime] = None
    is_trashed: bool = False
    trashed_at: Optional[datetime] = None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_file(row) -> CloudFile:
    return CloudFile(
        file_id=row["file_id"],
        name=row["name"],
        size=row["size"],
        file_type=FileType(row["file_type"]),
        parent_id=row["parent_id"],
        owner_id=row["owner_id"],
        mime_type=row["mime_type"],
        storage_key=row["storage_key"],
        created_at=datetime.fromisoformat(row["created_at"]),
        is_shared=bool(row["is_shared"]),
        share_token=row["share_token"],
        share_created_at=_parse_timestamp(row["share_created_at"]),
        is_trashed=bool(row["is_trashed"]),
        trashed_at=_parse_timestamp(row["trashed_at"]),
    )


def _select_one(conn, file_id: str):
    return conn.execute(
        f"SELECT {_FILE_COLUMNS} FROM files WHERE file_id = ?", (file_id,)
    ).fetchone()


class FileRepository:
    @staticmethod
    async def create_file(file: CloudFile, content: Optional[bytes]) -> CloudFile:
        def _insert(conn):
            conn.execute(
                f"""
                INSERT INTO files ({_FILE_COLUMNS}, content)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (file.file_id, file.name, file.size, file.file_type.value, file.parent_id,
                 file.owner_id, file.mime_type, file.storage_key, file.created_at.isoformat(),
                 int(file.is_shared), file.share_token,
                 file.share_created_at.isoformat() if file.share_created_at else None,
                 int(file.is_trashed), file.trashed_at.isoformat() if file.trashed_at else None,
                 content)
            )

        await run_in_store(_insert)
        logger.debug(f"File record created: {file.name} [file_id={file.file_id}]")
        return file

    @staticmethod
    async def get_by_id(file_id: str) -> Optional[CloudFile]:
        row = await run_in_store(lambda conn: _select_one(conn, file_id))
        if row is None:
            return None
        return _row_to_file(row)

    @staticmethod
    async def get_content(file_id: str) -> Optional[bytes]:
        def _select(conn):
            return conn.execute("SELECT content FROM files WHERE file_id = ?", (file_id,)).fetchone()

        row = await run_in_store(_select)
        if row is None or row["content"] is None:
            return None
        return bytes(row["content"])

    @staticmethod
    async def list_by_parent(parent_id: str, owner_id: str) -> List[CloudFile]:
        def _select(conn):
            return conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE parent_id = ? AND owner_id = ? AND is_trashed = 0
                ORDER BY rowid
                """,
                (parent_id, owner_id)
            ).fetchall()

        rows = await run_in_store(_select)
        return [_row_to_file(row) for row in rows]

    @staticmethod
    async def list_trashed_by_owner(owner_id: str) -> List[CloudFile]:
        def _select(conn):
            return conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE owner_id = ? AND is_trashed = 1
                ORDER BY rowid
                """,
                (owner_id,)
            ).fetchall()

        rows = await run_in_store(_select)
        return [_row_to_file(row) for row in rows]

    @staticmethod
    async def list_trashed_before(cutoff: datetime) -> List[CloudFile]:
        def _select(conn):
            return conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE is_trashed = 1 AND trashed_at IS NOT NULL AND trashed_at <= ?
                ORDER BY trashed_at
                """,
                (cutoff.isoformat(),)
            ).fetchall()

        rows = await run_in_store(_select)
        return [_row_to_file(row) for row in rows]

    @staticmethod
    async def list_by_owner(owner_id: str) -> List[CloudFile]:
        def _select(conn):
            return conn.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE owner_id = ? ORDER BY rowid", (owner_id,)
            ).fetchall()

        rows = await run_in_store(_select)
        return [_row_to_file(row) for row in rows]

    @staticmethod
    async def list_all() -> List[CloudFile]:
        rows = await run_in_store(
            lambda conn: conn.execute(f"SELECT {_FILE_COLUMNS} FROM files ORDER BY rowid").fetchall()
        )
        return [_row_to_file(row) for row in rows]

    @staticmethod
    async def find_shared_by_token(token: str) -> Optional[CloudFile]:
        def _select(conn):
            return conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE share_token = ? AND is_shared = 1 AND is_trashed = 0
                ORDER BY rowid
                LIMIT 1
                """,
                (token,)
            ).fetchone()

        row = await run_in_store(_select)
        if row is None:
            return None
        return _row_to_file(row)

    @staticmethod
    async def mark_trashed(file_id: str, trashed_at: datetime) -> Optional[CloudFile]:
        """
        Move a file to trash and revoke its share in one transaction.

        Returns:
            The updated record, or None if the file does not exist
        """
        def _update(conn):
            if _select_one(conn, file_id) is None:
                return None
            conn.execute(
                """
                UPDATE files
                SET is_trashed = 1, trashed_at = ?, is_shared = 0,
                    share_token = NULL, share_created_at = NULL
                WHERE file_id = ?
                """,
                (trashed_at.isoformat(), file_id)
            )
            return _select_one(conn, file_id)

        row = await run_in_store(_update, immediate=True)
        return _row_to_file(row) if row is not None else None

    @staticmethod
    async def mark_restored(file_id: str) -> Optional[CloudFile]:
        def _update(conn):
            if _select_one(conn, file_id) is None:
                return None
            conn.execute(
                "UPDATE files SET is_trashed = 0, trashed_at = NULL WHERE file_id = ?",
                (file_id,)
            )
            return _select_one(conn, file_id)

        row = await run_in_store(_update, immediate=True)
        return _row_to_file(row) if row is not None else None

    @staticmethod
    async def update_share(
        file_id: str,
        enabled: bool,
        token: Optional[str],
        shared_at: Optional[datetime],
    ) -> Optional[CloudFile]:
        """
        Enable or disable sharing in one transaction.

        A trashed file is never switched to shared; the unchanged record is
        returned so the caller can report it.

        Returns:
            The record after the update, or None if the file does not exist
        """
        def _update(conn):
            row = _select_one(conn, file_id)
            if row is None:
                return None
            if enabled and row["is_trashed"]:
                return row
            if enabled:
                conn.execute(
                    "UPDATE files SET is_shared = 1, share_token = ?, share_created_at = ? WHERE file_id = ?",
                    (token, shared_at.isoformat(), file_id)
                )
            else:
                conn.execute(
                    "UPDATE files SET is_shared = 0, share_token = NULL, share_created_at = NULL WHERE file_id = ?",
                    (file_id,)
                )
            return _select_one(conn, file_id)

        row = await run_in_store(_update, immediate=True)
        return _row_to_file(row) if row is not None else None

    @staticmethod
    async def delete_file(file_id: str) -> bool:
        def _delete(conn):
            return conn.execute("DELETE FROM files WHERE file_id = ?", (file_id,)).rowcount > 0

        return await run_in_store(_delete)

    @staticmethod
    async def sum_sizes_by_owner(owner_id: str) -> int:
        def _select(conn):
            return conn.execute(
                "SELECT COALESCE(SUM(size), 0) FROM files WHERE owner_id = ?", (owner_id,)
            ).fetchone()[0]

        return await run_in_store(_select)

    @staticmethod
    async def get_totals() -> Tuple[int, int]:
        """
        Returns:
            (number of files, sum of sizes) over the whole collection
        """
        def _select(conn):
            row = conn.execute("SELECT COUNT(*), COALESCE(SUM(size), 0) FROM files").fetchone()
            return row[0], row[1]

        return await run_in_store(_select)

    @staticmethod
    async def count_by_type() -> Dict[FileType, int]:
        def _select(conn):
            return conn.execute(
                "SELECT file_type, COUNT(*) AS total FROM files GROUP BY file_type"
            ).fetchall()

        rows = await run_in_store(_select)
        return {FileType(row["file_type"]): row["total"] for row in rows}
