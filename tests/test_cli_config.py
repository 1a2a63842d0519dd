"""Tests for CLI configuration module."""

import json

import pytest

from cli.config import Config, default_settings
from cli.main import parse_server


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.cloudfire' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()

    assert config.data['server_host'] == default_settings()['server_host']
    assert config.data['server_port'] == default_settings()['server_port']
    assert config.data['timeout'] == 30
    assert config.data['max_retries'] == 3
    assert config.data['retry_backoff_multiplier'] == 2
    assert 'api_key' not in config.data


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file."""
    config_path = tmp_path / '.cloudfire' / 'config.json'
    config_path.parent.mkdir(parents=True)

    existing_data = {
        'api_key': 'cf_test123',
        'server_host': 'example.com',
        'server_port': 9000,
    }
    with open(config_path, 'w') as f:
        json.dump(existing_data, f)

    config = Config(config_path)

    assert config.data['api_key'] == 'cf_test123'
    assert config.get_base_url() == 'http://example.com:9000'
    assert config.data['timeout'] == 30
    assert config.data['max_retries'] == 3


def test_config_save_and_get_api_key(temp_config):
    """Test saving and retrieving API key."""
    assert temp_config.get_api_key() is None

    temp_config.set_api_key('cf_abc123')

    assert temp_config.get_api_key() == 'cf_abc123'
    with open(temp_config.config_path, 'r') as f:
        data = json.load(f)
    assert data['api_key'] == 'cf_abc123'


def test_corrupt_config_is_backed_up(temp_config_dir):
    """Test that an unreadable config falls back to defaults and keeps a backup."""
    config_path = temp_config_dir / 'config.json'
    config_path.write_text('{not json')

    config = Config(config_path)

    assert config.get_api_key() is None
    assert config.data['timeout'] == 30
    backup = temp_config_dir / 'config.json.bak'
    assert backup.read_text() == '{not json'


def test_retry_config(temp_config):
    assert temp_config.get_retry_config() == {'max_retries': 3, 'retry_backoff_multiplier': 2}
    assert temp_config.get_timeout() == 30


def test_clear_api_key(temp_config):
    temp_config.set_api_key('cf_abc123')

    assert temp_config.clear_api_key() is True
    assert temp_config.get_api_key() is None
    assert temp_config.clear_api_key() is False

    reloaded = Config(temp_config.config_path)
    assert reloaded.get_api_key() is None


def test_set_server_persists(temp_config):
    temp_config.set_server('files.example.com', 9443)

    reloaded = Config(temp_config.config_path)
    assert reloaded.get_base_url() == 'http://files.example.com:9443'


def test_env_overrides_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv('CLOUDFIRE_HOST', 'envhost')
    monkeypatch.setenv('CLOUDFIRE_PORT', '9001')

    config = Config(tmp_path / 'config.json')

    assert config.get_base_url() == 'http://envhost:9001'


def test_parse_server_argument():
    assert parse_server('files.example.com:9000') == ('files.example.com', 9000)
    assert parse_server('localhost') == ('localhost', 8000)
    with pytest.raises(ValueError):
        parse_server('host:http')
