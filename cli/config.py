"""Configuration management for the CloudFire CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.cloudfire' / 'config.json'


def default_settings() -> dict:
    """
    Settings used when the config file is missing or unreadable.

    CLOUDFIRE_HOST and CLOUDFIRE_PORT are read at call time so a shell can
    point a fresh config at another server.
    """
    return {
        "server_host": os.environ.get("CLOUDFIRE_HOST", "localhost"),
        "server_port": int(os.environ.get("CLOUDFIRE_PORT", "8000")),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }


class Config:
    """CLI settings and the current API key, persisted as JSON."""

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self.config_path = config_path
        self.data = self._load()

    def _ensure_directory(self) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            fallback = Path(tempfile.gettempdir()) / '.cloudfire' / 'config.json'
            logger.warning(f"Cannot write to {self.config_path.parent}, using {fallback}")
            self.config_path = fallback
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict:
        """
        Read the config file, filling missing keys from default_settings().

        A missing file is created with the defaults. A corrupt one is copied
        to config.json.bak and the defaults are used instead.
        """
        self._ensure_directory()
        settings = default_settings()

        if not self.config_path.exists():
            self.data = settings
            self.save()
            return settings

        try:
            with open(self.config_path, 'r') as f:
                settings.update(json.load(f))
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Config file unreadable, using defaults: {e}")
            try:
                shutil.copy(self.config_path, self.config_path.with_suffix('.json.bak'))
            except OSError as copy_error:
                logger.debug(f"Could not back up config file: {copy_error}")
            return default_settings()

        return settings

    def save(self) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Failed to save config: {e}")

    def get_api_key(self) -> Optional[str]:
        return self.data.get('api_key')

    def set_api_key(self, key: str) -> None:
        """
        Store the key returned by register/login ("cf_<uuid>") and save.
        """
        self.data['api_key'] = key
        self.save()

    def clear_api_key(self) -> bool:
        """
        Forget the stored API key.

        Returns:
            True if a key was stored
        """
        had_key = self.data.pop('api_key', None) is not None
        self.save()
        return had_key

    def set_server(self, host: str, port: int) -> None:
        self.data['server_host'] = host
        self.data['server_port'] = port
        self.save()

    def get_base_url(self) -> str:
        """
        Returns:
            Base URL string (e.g., "http://localhost:8000")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', 8000)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }
