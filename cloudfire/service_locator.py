"""Service locator for the process-wide storage engine."""

from typing import Optional

from cloudfire.engine import StorageEngine

_engine: Optional[StorageEngine] = None


def set_engine(engine: Optional[StorageEngine]):
    """Set global storage engine instance"""
    global _engine
    _engine = engine


def get_engine() -> StorageEngine:
    """Get global storage engine instance, creating it on first use"""
    global _engine
    if _engine is None:
        _engine = StorageEngine()
    return _engine
