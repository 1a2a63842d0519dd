"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from cli.config import Config
from cloudfire.database import init_database
from cloudfire.engine import StorageEngine
from cloudfire.service_locator import set_engine


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .cloudfire directory
    """
    config_dir = tmp_path / '.cloudfire'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def test_db(monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.

    bcrypt is switched to its cheapest cost so registering users stays fast.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("cloudfire.database.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("cloudfire.config.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("cloudfire.config.BCRYPT_ROUNDS", 4)
        init_database()
        yield db_path


@pytest.fixture
def engine(test_db) -> Generator[StorageEngine, None, None]:
    """
    Fresh engine bound to the temporary database and installed in the
    service locator.
    """
    storage_engine = StorageEngine()
    set_engine(storage_engine)
    yield storage_engine
    set_engine(None)
