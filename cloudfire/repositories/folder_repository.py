"""Folder repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from cloudfire.database import run_in_store

logger = get_logger(__name__)

_FOLDER_COLUMNS = "folder_id, name, parent_id, owner_id, created_at, is_trashed, trashed_at"


@dataclass
class Folder:
    folder_id: str
    name: str
    parent_id: str
    owner_id: str
    created_at: datetime
    is_trashed: bool = False
    trashed_at: Optional[datetime] = None


def _row_to_folder(row) -> Folder:
    return Folder(
        folder_id=row["folder_id"],
        name=row["name"],
        parent_id=row["parent_id"],
        owner_id=row["owner_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        is_trashed=bool(row["is_trashed"]),
        trashed_at=datetime.fromisoformat(row["trashed_at"]) if row["trashed_at"] else None,
    )


def _select_one(conn, folder_id: str):
    return conn.execute(
        f"SELECT {_FOLDER_COLUMNS} FROM folders WHERE folder_id = ?", (folder_id,)
    ).fetchone()


class FolderRepository:
    @staticmethod
    async def create_folder(folder: Folder) -> Folder:
        def _insert(conn):
            conn.execute(
                f"INSERT INTO folders ({_FOLDER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (folder.folder_id, folder.name, folder.parent_id, folder.owner_id,
                 folder.created_at.isoformat(), int(folder.is_trashed),
                 folder.trashed_at.isoformat() if folder.trashed_at else None)
            )

        await run_in_store(_insert)
        logger.debug(f"Folder record created: {folder.name} [folder_id={folder.folder_id}]")
        return folder

    @staticmethod
    async def get_by_id(folder_id: str) -> Optional[Folder]:
        row = await run_in_store(lambda conn: _select_one(conn, folder_id))
        return _row_to_folder(row) if row is not None else None

    @staticmethod
    async def list_by_parent(parent_id: str, owner_id: str) -> List[Folder]:
        def _select(conn):
            return conn.execute(
                f"""
                SELECT {_FOLDER_COLUMNS} FROM folders
                WHERE parent_id = ? AND owner_id = ? AND is_trashed = 0
                ORDER BY rowid
                """,
                (parent_id, owner_id)
            ).fetchall()

        rows = await run_in_store(_select)
        return [_row_to_folder(row) for row in rows]

    @staticmethod
    async def list_trashed_by_owner(owner_id: str) -> List[Folder]:
        def _select(conn):
            return conn.execute(
                f"""
                SELECT {_FOLDER_COLUMNS} FROM folders
                WHERE owner_id = ? AND is_trashed = 1
                ORDER BY rowid
                """,
                (owner_id,)
            ).fetchall()

        rows = await run_in_store(_select)
        return [_row_to_folder(row) for row in rows]

    @staticmethod
    async def set_trashed(folder_id: str, trashed_at: Optional[datetime]) -> Optional[Folder]:
        """
        Trash (trashed_at given) or restore (None) a single folder.

        Returns:
            The updated record, or None if the folder does not exist
        """
        def _update(conn):
            if _select_one(conn, folder_id) is None:
                return None
            conn.execute(
                "UPDATE folders SET is_trashed = ?, trashed_at = ? WHERE folder_id = ?",
                (int(trashed_at is not None),
                 trashed_at.isoformat() if trashed_at else None,
                 folder_id)
            )
            return _select_one(conn, folder_id)

        row = await run_in_store(_update, immediate=True)
        return _row_to_folder(row) if row is not None else None

    @staticmethod
    async def delete_by_owner(owner_id: str) -> int:
        def _delete(conn):
            return conn.execute("DELETE FROM folders WHERE owner_id = ?", (owner_id,)).rowcount

        return await run_in_store(_delete)
