"""Tests for CloudFireClient against a mocked HTTP transport."""

import json

import httpx
import pytest

from cli.api_client import CloudFireClient


def make_client(temp_config, handler, api_key='cf_key'):
    if api_key:
        temp_config.set_api_key(api_key)
    return CloudFireClient(temp_config, transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr('cli.api_client.time.sleep', lambda seconds: None)


def test_register_saves_api_key(temp_config):
    def handler(request):
        assert request.url.path == '/auth/register'
        assert json.loads(request.content) == {'username': 'alice', 'password': 'pw', 'email': ''}
        return httpx.Response(201, json={'api_key': 'cf_new', 'user_id': 'u-1'})

    client = make_client(temp_config, handler, api_key=None)
    result = client.register('alice', 'pw')

    assert 'Registration successful' in result
    assert 'u-1' in result
    assert temp_config.get_api_key() == 'cf_new'


def test_register_duplicate_message(temp_config):
    def handler(request):
        return httpx.Response(409, json={'detail': 'exists', 'code': 'USER_ALREADY_EXISTS'})

    result = make_client(temp_config, handler, api_key=None).register('alice', 'pw')

    assert result.startswith('Registration failed: Username already taken')


def test_login_failure_keeps_old_key(temp_config):
    def handler(request):
        return httpx.Response(401, json={'detail': 'bad', 'code': 'INVALID_CREDENTIALS'})

    client = make_client(temp_config, handler, api_key='cf_old')
    result = client.login('alice', 'wrong')

    assert result == 'Login failed: Invalid username or password.'
    assert temp_config.get_api_key() == 'cf_old'


def test_authenticated_call_without_login(temp_config):
    client = make_client(temp_config, lambda request: httpx.Response(200), api_key=None)

    assert client.list_directory() == 'Error: Not logged in. Please run: login <username> <password>'


def test_requests_carry_bearer_and_request_id(temp_config):
    seen = {}

    def handler(request):
        seen['auth'] = request.headers.get('Authorization')
        seen['request_id'] = request.headers.get('X-Request-ID')
        seen['params'] = dict(request.url.params)
        return httpx.Response(200, json={'files': [], 'folders': []})

    client = make_client(temp_config, handler)
    result = client.list_directory()

    assert result == "Folder 'root' is empty."
    assert seen['auth'] == 'Bearer cf_key'
    assert seen['request_id'] == client.request_id
    assert seen['params'] == {'parent_id': 'root'}


def test_list_directory_renders_entries(temp_config):
    def handler(request):
        return httpx.Response(200, json={
            'folders': [{'folder_id': 'f-1', 'name': 'docs'}],
            'files': [{
                'file_id': 'a-1', 'name': 'a.txt', 'size': 2048, 'file_type': 'DOCUMENT',
                'is_shared': True, 'created_at': '2024-01-01T00:00:00+00:00',
            }],
        })

    result = make_client(temp_config, handler).list_directory('f-0')

    assert "1 folder(s), 1 file(s) in 'f-0'" in result
    assert '[DIR] docs' in result
    assert '2.00 KiB' in result
    assert '[shared]' in result


def test_upload_sends_multipart(temp_config, sample_file):
    def handler(request):
        assert request.url.path == '/files'
        body = request.content
        assert b'Sample content for testing' in body
        assert b'name="parent_id"' in body
        return httpx.Response(201, json={
            'file_id': 'id-1', 'name': 'test.txt', 'size': 26, 'file_type': 'DOCUMENT',
        })

    result = make_client(temp_config, handler).upload(str(sample_file))

    assert result == 'Uploaded: test.txt (ID: id-1, Size: 26 B, Type: DOCUMENT)'


def test_upload_missing_file(temp_config, tmp_path):
    client = make_client(temp_config, lambda request: httpx.Response(500))
    missing = tmp_path / 'nope.txt'

    assert client.upload(str(missing)) == f'Error: File not found: {missing}'


def test_download_uses_server_filename(temp_config, tmp_path):
    def handler(request):
        assert request.url.path == '/files/id-1/download'
        return httpx.Response(
            200,
            content=b'file bytes',
            headers={'Content-Disposition': "attachment; filename*=UTF-8''my%20notes.txt"},
        )

    output_dir = tmp_path / 'downloads'
    output_dir.mkdir()
    result = make_client(temp_config, handler).download('id-1', str(output_dir))

    assert (output_dir / 'my notes.txt').read_bytes() == b'file bytes'
    assert 'Downloaded: my notes.txt' in result


def test_download_not_found(temp_config, tmp_path):
    def handler(request):
        return httpx.Response(404, json={'detail': "File 'x' not found", 'code': 'NOT_FOUND'})

    result = make_client(temp_config, handler).download('x', str(tmp_path))

    assert result == "Error: File 'x' not found"


def test_share_and_unshare_messages(temp_config):
    def handler(request):
        enabled = json.loads(request.content)['enabled']
        if enabled:
            return httpx.Response(200, json={
                'file_id': 'id-1', 'is_shared': True, 'share_token': 'tok',
                'share_url': 'http://localhost:8000/shared?share=tok',
            })
        return httpx.Response(200, json={
            'file_id': 'id-1', 'is_shared': False, 'share_token': None, 'share_url': None,
        })

    client = make_client(temp_config, handler)

    assert client.share('id-1') == 'Share link: http://localhost:8000/shared?share=tok\nToken: tok'
    assert client.share('id-1', enabled=False) == 'Sharing disabled for id-1'


def test_open_share_is_anonymous(temp_config):
    def handler(request):
        assert 'Authorization' not in request.headers
        assert request.url.params['share'] == 'tok'
        return httpx.Response(200, json={
            'name': 'a.txt', 'size': 5, 'file_type': 'DOCUMENT', 'share_created_at': '2024-01-01',
        })

    result = make_client(temp_config, handler, api_key=None).open_share('tok')

    assert result.startswith('a.txt (5 B, DOCUMENT)')


def test_trash_commands(temp_config):
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        if request.url.path == '/trash' and request.method == 'DELETE':
            return httpx.Response(200, json={'count': 2})
        if request.url.path == '/trash':
            return httpx.Response(200, json={'files': [], 'folders': []})
        return httpx.Response(204)

    client = make_client(temp_config, handler)

    assert client.trash('a') == 'Moved to trash: a'
    assert client.restore('a') == 'Restored: a'
    assert client.delete_permanently('a') == 'Permanently deleted: a'
    assert client.list_trash() == 'Trash is empty.'
    assert client.empty_trash() == 'Permanently deleted 2 file(s) from the trash.'
    assert calls[:3] == [('POST', '/files/a/trash'), ('POST', '/files/a/restore'), ('DELETE', '/files/a')]


def test_stats_forbidden(temp_config):
    def handler(request):
        return httpx.Response(403, json={'detail': 'Admin privileges required', 'code': 'UNAUTHORIZED_ACCESS'})

    assert make_client(temp_config, handler).stats() == 'Error: You do not have permission to do that.'


def test_retries_server_errors(temp_config):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503, json={'detail': 'down', 'code': 'STORE_UNAVAILABLE'})
        return httpx.Response(200, json={'files': [], 'folders': []})

    result = make_client(temp_config, handler).list_directory()

    assert result == "Folder 'root' is empty."
    assert len(attempts) == 3


def test_connection_failure_after_retries(temp_config):
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError('refused', request=request)

    result = make_client(temp_config, handler).whoami()

    assert result == 'Error: Cannot connect to CloudFire server. Is it running?'
    assert len(attempts) == 4


def test_upload_not_resent_after_read_timeout(temp_config, sample_file):
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ReadTimeout('no answer', request=request)

    result = make_client(temp_config, handler).upload(str(sample_file))

    assert result == 'Error: Request timed out. Server may be overloaded.'
    assert len(attempts) == 1


def test_upload_not_resent_after_server_error(temp_config, sample_file):
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(503, json={'detail': 'down', 'code': 'STORE_UNAVAILABLE'})

    result = make_client(temp_config, handler).upload(str(sample_file))

    assert result == 'Error: Storage is currently unavailable. Please try again later.'
    assert len(attempts) == 1


def test_upload_resent_when_connection_refused(temp_config, sample_file):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError('refused', request=request)
        return httpx.Response(201, json={
            'file_id': 'id-1', 'name': 'test.txt', 'size': 26, 'file_type': 'DOCUMENT',
        })

    result = make_client(temp_config, handler).upload(str(sample_file))

    assert result.startswith('Uploaded: test.txt')
    assert len(attempts) == 2


def test_get_retried_after_read_timeout(temp_config):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ReadTimeout('slow', request=request)
        return httpx.Response(200, json={'files': [], 'folders': []})

    assert make_client(temp_config, handler).list_directory() == "Folder 'root' is empty."
    assert len(attempts) == 2


def test_logout_clears_local_key(temp_config):
    client = make_client(temp_config, lambda request: httpx.Response(500))

    assert client.logout() == 'Logged out.'
    assert temp_config.get_api_key() is None
    assert client.logout() == 'Not logged in.'
