"""Project-wide constants (root sentinel, plan limits, store layout)."""

GIB: int = 1024 * 1024 * 1024

ROOT_FOLDER_ID: str = "root"

DEFAULT_ROOT_PATH: str = "public/content"
DEFAULT_MIME_TYPE: str = "application/octet-stream"

STORE_VERSION: int = 2
CONFIG_ROW_KEY: str = "cdn"

API_KEY_PREFIX: str = "cf_"

FREE_STORAGE_LIMIT: int = 5 * GIB
PRO_STORAGE_LIMIT: int = 1024 * GIB
ENTERPRISE_STORAGE_LIMIT: int = 100 * GIB

PLAN_STORAGE_LIMITS: dict[str, int] = {
    "free": FREE_STORAGE_LIMIT,
    "pro": PRO_STORAGE_LIMIT,
    "enterprise": ENTERPRISE_STORAGE_LIMIT,
}
