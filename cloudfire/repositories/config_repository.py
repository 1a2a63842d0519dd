"""Repository for the single storage-backend configuration record."""

import json
from dataclasses import asdict, dataclass
from typing import Optional

from common.constants import CONFIG_ROW_KEY
from common.logging_config import get_logger
from common.types import Provider
from cloudfire.database import run_in_store

logger = get_logger(__name__)


@dataclass
class StorageConfig:
    """
    Active storage backend. Only ``root_path`` influences the engine (it
    prefixes storage keys); provider credentials are kept for the admin screen.
    """
    provider: Provider = Provider.LOCAL
    root_path: Optional[str] = None
    endpoint: Optional[str] = None
    region: Optional[str] = None
    bucket: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None

    def to_json(self) -> str:
        data = asdict(self)
        data["provider"] = self.provider.value
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> "StorageConfig":
        data = json.loads(raw)
        known = {key: data.get(key) for key in cls.__dataclass_fields__ if key != "provider"}
        return cls(provider=Provider(data.get("provider", Provider.LOCAL.value)), **known)


class ConfigRepository:
    @staticmethod
    async def get() -> Optional[StorageConfig]:
        def _select(conn):
            return conn.execute("SELECT value FROM config WHERE key = ?", (CONFIG_ROW_KEY,)).fetchone()

        row = await run_in_store(_select)
        if row is None:
            return None
        return StorageConfig.from_json(row["value"])

    @staticmethod
    async def put(config: StorageConfig) -> None:
        def _upsert(conn):
            conn.execute(
                """
                INSERT INTO config (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (CONFIG_ROW_KEY, config.to_json())
            )

        await run_in_store(_upsert)
        logger.info(f"Storage config saved [provider={config.provider.value}]")
