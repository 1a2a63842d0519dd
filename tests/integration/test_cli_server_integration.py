"""Integration tests for CLI-server communication."""

import pytest
from fastapi.testclient import TestClient

from cli.api_client import CloudFireClient
from cloudfire.main import app


@pytest.fixture
def cli_client(engine, temp_config):
    """CloudFireClient whose HTTP session talks to the app in-process."""
    with TestClient(app) as api:
        client = CloudFireClient(temp_config)
        client.session.close()
        client.session = api
        yield client


def test_register_upload_list_download(cli_client, sample_file, tmp_path):
    assert 'Registration successful' in cli_client.register('alice', 'secret123')

    uploaded = cli_client.upload(str(sample_file))
    assert uploaded.startswith('Uploaded: test.txt')
    file_id = uploaded.split('ID: ')[1].split(',')[0]

    listing = cli_client.list_directory()
    assert "0 folder(s), 1 file(s) in 'root'" in listing
    assert file_id in listing

    out_dir = tmp_path / 'out'
    out_dir.mkdir()
    downloaded = cli_client.download(file_id, str(out_dir))
    assert 'Downloaded: test.txt' in downloaded
    assert (out_dir / 'test.txt').read_text() == 'Sample content for testing'


def test_whoami_reports_usage(cli_client, sample_file):
    cli_client.register('alice', 'secret123', 'alice@example.com')
    cli_client.upload(str(sample_file))

    result = cli_client.whoami()

    assert result.startswith('alice (user, plan: free)')
    assert 'alice@example.com' in result
    assert '26 B / 5.00 GiB' in result


def test_folder_trash_and_share_flow(cli_client, sample_file):
    cli_client.register('alice', 'secret123')
    created = cli_client.create_folder('docs')
    folder_id = created.split('ID: ')[1].rstrip(')')

    uploaded = cli_client.upload(str(sample_file), folder_id)
    file_id = uploaded.split('ID: ')[1].split(',')[0]
    assert '[DIR] docs' in cli_client.list_directory()

    shared = cli_client.share(file_id)
    token = shared.split('Token: ')[1]
    assert cli_client.open_share(token).startswith('test.txt (26 B, DOCUMENT)')

    assert cli_client.trash(file_id) == f'Moved to trash: {file_id}'
    assert cli_client.open_share(token) == 'Error: Shared file not found'
    assert 'test.txt' in cli_client.list_trash()

    assert cli_client.empty_trash() == 'Permanently deleted 1 file(s) from the trash.'
    assert cli_client.list_trash() == 'Trash is empty.'


def test_login_errors_and_admin_stats(cli_client):
    assert cli_client.login('nobody', 'x') == 'Login failed: Invalid username or password.'

    cli_client.register('alice', 'secret123')
    assert cli_client.stats() == 'Error: You do not have permission to do that.'

    assert 'Login successful' in cli_client.login('admin', 'password')
    stats = cli_client.stats()
    assert 'Users: 2' in stats
    assert 'IMAGE' in stats
