"""Pydantic schemas for admin endpoints."""

from typing import List, Optional

from pydantic import BaseModel

from common.types import Provider, SystemStats
from cloudfire.repositories.config_repository import StorageConfig


class StorageConfigSchema(BaseModel):
    """Storage backend configuration, used for both request and response."""
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

    @classmethod
    def from_config(cls, storage_config: StorageConfig) -> "StorageConfigSchema":
        return cls(**vars(storage_config))

    def to_config(self) -> StorageConfig:
        return StorageConfig(**self.model_dump())


class CategoryCountResponse(BaseModel):
    name: str
    count: int


class SystemStatsResponse(BaseModel):
    """Response model for dashboard aggregates."""
    total_users: int
    total_files: int
    total_storage: int
    breakdown_by_category: List[CategoryCountResponse]

    @classmethod
    def from_stats(cls, stats: SystemStats) -> "SystemStatsResponse":
        return cls(
            total_users=stats.total_users,
            total_files=stats.total_files,
            total_storage=stats.total_storage,
            breakdown_by_category=[
                CategoryCountResponse(name=entry.name, count=entry.count)
                for entry in stats.breakdown_by_category
            ],
        )
