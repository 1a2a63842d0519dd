"""HTTP client for communicating with the CloudFire server."""

import mimetypes
import sys
import time
import uuid
from pathlib import Path
from typing import Callable, Optional

import httpx

from common.constants import ROOT_FOLDER_ID
from common.logging_config import get_logger
from cli.config import Config
from cli.constants import GREEN, RESET
from cli.utils import filename_from_disposition, format_file_size, format_usage

logger = get_logger(__name__)

# Server error codes with a friendlier wording for the REPL.
ERROR_MESSAGES = {
    'INVALID_API_KEY': 'Not authenticated. Please run: login <username> <password>',
    'USER_ALREADY_EXISTS': 'Username already taken. Try logging in or choose a different username.',
    'INVALID_CREDENTIALS': 'Invalid username or password.',
    'ACCOUNT_DISABLED': 'This account has been disabled. Contact an administrator.',
    'UNAUTHORIZED_ACCESS': 'You do not have permission to do that.',
    'STORE_UNAVAILABLE': 'Storage is currently unavailable. Please try again later.',
}

# Codes whose server detail is already meant for the user.
DETAIL_CODES = ('NOT_FOUND', 'VALIDATION_ERROR')

STATUS_MESSAGES = {
    400: 'Bad request',
    401: 'Not authenticated',
    403: 'Access forbidden',
    404: 'Not found',
    413: 'File too large',
    422: 'Invalid request',
    500: 'Server error',
    503: 'Service unavailable',
}

# Methods safe to resend after the server may already have acted on them.
IDEMPOTENT_METHODS = ('GET', 'HEAD', 'PUT', 'DELETE')

NOT_LOGGED_IN = "Not logged in. Please run: login <username> <password>"


class CloudFireClient:
    """HTTP client for the CloudFire API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        logger.info(f"Initialized CloudFireClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, file_size: int) -> float:
        """
        Returns:
            Timeout in seconds (30s base + 0.1s per MB)
        """
        return 30.0 + (file_size / (1024 * 1024)) * 0.1

    def _resolve_download_path(self, output_path: Optional[str], filename: str) -> Path:
        """
        Pick where a download is written.

        No output path means the current directory. An existing directory, or
        a path ending in '/', receives the file under its server-side name.
        """
        if not output_path:
            return Path.cwd() / filename

        output_file = Path(output_path).expanduser()
        if output_path.endswith(('/', '\\')) or output_file.is_dir():
            output_file = output_file / filename

        output_file.parent.mkdir(parents=True, exist_ok=True)
        return output_file

    def _backoff(self, attempt: int, reason: str, method: str, endpoint: str, attempts: int) -> None:
        delay = self.config.get_retry_config()['retry_backoff_multiplier'] ** attempt
        logger.warning(
            f"{reason} (attempt {attempt + 1}/{attempts}): {method} {endpoint}, "
            f"retrying in {delay}s [request_id={self.request_id}]"
        )
        time.sleep(delay)

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Send a request, retrying 5xx answers and network failures.

        GET, PUT and DELETE are retried on any network error or 5xx answer.
        Other methods (uploads, trash, share) are only resent when the
        connection was never established, since the server may already have
        applied them. 4xx answers are returned immediately, and the last 5xx
        answer is returned once retries run out.

        Raises:
            ConnectionError: If the server could not be reached
        """
        if max_retries is None:
            max_retries = self.config.get_retry_config()['max_retries']
        attempts = max_retries + 1
        idempotent = method.upper() in IDEMPOTENT_METHODS

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})['X-Request-ID'] = self.request_id
        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        network_error = None
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = self.session.request(method, endpoint, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                network_error = e
                never_sent = isinstance(e, (httpx.ConnectError, httpx.ConnectTimeout))
                if last_attempt or not (idempotent or never_sent):
                    logger.error(f"Giving up on {method} {endpoint}: {e} [request_id={self.request_id}]")
                    break
                self._backoff(attempt, f"Network error {type(e).__name__}", method, endpoint, attempts)
                continue

            logger.debug(f"{method} {endpoint} -> {response.status_code} [request_id={self.request_id}]")
            if response.status_code >= 500 and idempotent and not last_attempt:
                self._backoff(attempt, f"Server error {response.status_code}", method, endpoint, attempts)
                continue
            if response.is_client_error:
                logger.warning(f"Client error: {method} {endpoint} status={response.status_code}")
            return response

        if isinstance(network_error, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to CloudFire server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map an error response to a user-facing message.
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        if code in ERROR_MESSAGES:
            return ERROR_MESSAGES[code]
        if code in DETAIL_CODES:
            return str(detail)

        message = STATUS_MESSAGES.get(response.status_code, str(detail))
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Raises:
            ValueError: If no API key is configured
        """
        api_key = self.config.get_api_key()
        if not api_key:
            raise ValueError(NOT_LOGGED_IN)
        return {'Authorization': f'Bearer {api_key}'}

    def _authed_request(
        self,
        method: str,
        endpoint: str,
        on_success: Callable[[httpx.Response], str],
        action: str,
        **kwargs
    ) -> str:
        """
        Run an authenticated request and turn the outcome into a message.

        on_success receives the response when its status is 2xx.
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        return self._run(action, method, endpoint, on_success, "Error", headers=headers, **kwargs)

    def _run(
        self,
        action: str,
        method: str,
        endpoint: str,
        on_success: Callable[[httpx.Response], str],
        failure_prefix: str,
        **kwargs
    ) -> str:
        try:
            response = self._request_with_retry(method, endpoint, **kwargs)
            if response.is_success:
                return on_success(response)
            return f"{failure_prefix}: {self._format_error(response)}"
        except ConnectionError as e:
            logger.error(f"Connection error during {action}: {e}")
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error during {action}: {e}", exc_info=True)
            return f"Unexpected error during {action}: {e}"

    def _store_key(self, response: httpx.Response) -> dict:
        data = response.json()
        self.config.set_api_key(data['api_key'])
        return data

    def register(self, username: str, password: str, email: str = "") -> str:
        """
        Create an account. The server logs it in, so the returned key is stored.
        """
        logger.info(f"Attempting to register user: {username}")

        def _on_success(response: httpx.Response) -> str:
            data = self._store_key(response)
            logger.info(f"Registration successful for user: {username} [user_id={data['user_id']}]")
            return f"Registration successful!\nUser ID: {data['user_id']}\nAPI key saved to config."

        return self._run(
            'registration', 'POST', '/auth/register', _on_success, "Registration failed",
            json={'username': username, 'password': password, 'email': email},
        )

    def login(self, username: str, password: str) -> str:
        logger.info(f"Attempting to login user: {username}")

        def _on_success(response: httpx.Response) -> str:
            self._store_key(response)
            logger.info(f"Login successful for user: {username}")
            return "Login successful!\nAPI key updated in config."

        return self._run(
            'login', 'POST', '/auth/login', _on_success, "Login failed",
            json={'username': username, 'password': password},
        )

    def logout(self) -> str:
        """
        Forget the local API key. The server keeps it valid until the next
        login rotates it.
        """
        if self.config.clear_api_key():
            logger.info("Cleared stored API key")
            return "Logged out."
        return "Not logged in."

    def whoami(self) -> str:
        def _render(response: httpx.Response) -> str:
            user = response.json()
            return (
                f"{user['username']} ({user['role']}, plan: {user['plan']})\n"
                f"Email: {user['email'] or '-'}\n"
                f"Storage: {format_usage(user['storage_used'], user['storage_limit'])}"
            )

        return self._authed_request('GET', '/auth/me', _render, 'whoami')

    def list_directory(self, folder_id: Optional[str] = None) -> str:
        """
        List files and folders directly inside a folder.
        """
        parent_id = folder_id or ROOT_FOLDER_ID

        def _render(response: httpx.Response) -> str:
            data = response.json()
            folders, files = data['folders'], data['files']
            if not folders and not files:
                return f"Folder '{parent_id}' is empty."

            output = [f"{len(folders)} folder(s), {len(files)} file(s) in '{parent_id}':\n"]
            for folder in folders:
                output.append(f"  [DIR] {folder['name']}  (ID: {folder['folder_id']})")
            for file_meta in files:
                shared = "  [shared]" if file_meta['is_shared'] else ""
                output.append(
                    f"  {file_meta['name']}  (ID: {file_meta['file_id']})\n"
                    f"    Size: {format_file_size(file_meta['size'])}  Type: {file_meta['file_type']}{shared}\n"
                    f"    Created: {file_meta['created_at']}"
                )
            return '\n'.join(output)

        return self._authed_request('GET', '/files', _render, 'listing', params={'parent_id': parent_id})

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> str:
        def _render(response: httpx.Response) -> str:
            folder = response.json()
            return f"Created folder: {folder['name']} (ID: {folder['folder_id']})"

        return self._authed_request(
            'POST', '/folders', _render, 'mkdir',
            json={'name': name, 'parent_id': parent_id or ROOT_FOLDER_ID},
        )

    def upload(self, file_path: str, parent_id: Optional[str] = None) -> str:
        """
        Upload a local file into a folder (root by default).
        """
        path = Path(file_path).expanduser()
        if not path.exists():
            return f"Error: File not found: {file_path}"
        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        try:
            content = path.read_bytes()
        except IOError as e:
            return f"Error reading file: {e}"

        mime_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
        upload_timeout = self._calculate_upload_timeout(len(content))

        def _render(response: httpx.Response) -> str:
            result = response.json()
            return (
                f"Uploaded: {result['name']} "
                f"(ID: {result['file_id']}, "
                f"Size: {format_file_size(result['size'])}, "
                f"Type: {result['file_type']})"
            )

        logger.info(f"Uploading {path.name} ({format_file_size(len(content))})")
        return self._authed_request(
            'POST', '/files', _render, 'upload',
            files={'file': (path.name, content, mime_type)},
            data={'parent_id': parent_id or ROOT_FOLDER_ID},
            timeout=upload_timeout,
        )

    def download(self, file_id: str, output_path: Optional[str] = None) -> str:
        """
        Download a file by id with progress feedback.
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        try:
            with self.session.stream('GET', f'/files/{file_id}/download', headers=headers) as response:
                if response.status_code != 200:
                    response.read()
                    return f"Error: {self._format_error(response)}"

                filename = filename_from_disposition(response.headers.get('Content-Disposition'), file_id)
                output_file = self._resolve_download_path(output_path, filename)
                total_size = int(response.headers.get('Content-Length', 0))
                downloaded = 0

                with open(output_file, 'wb') as f:
                    for chunk in response.iter_bytes(chunk_size=8192):
                        f.write(chunk)
                        downloaded += len(chunk)
                        if total_size > 0:
                            progress = (downloaded / total_size) * 100
                            sys.stdout.write(
                                f"\rDownloading {filename}: {format_file_size(downloaded)} / "
                                f"{format_file_size(total_size)} ({GREEN}{progress:.1f}%{RESET})"
                            )
                            sys.stdout.flush()

                sys.stdout.write('\n')
                sys.stdout.flush()

                return f"Downloaded: {filename} ({format_file_size(downloaded)})\nSaved to: {output_file.absolute()}"

        except httpx.ConnectError:
            return "Error: Cannot connect to CloudFire server. Is it running?"
        except httpx.TimeoutException:
            return "Error: Request timed out. Server may be overloaded."
        except IOError as e:
            return f"Error writing file: {e}"

    def trash(self, file_id: str) -> str:
        return self._authed_request(
            'POST', f'/files/{file_id}/trash', lambda r: f"Moved to trash: {file_id}", 'trash'
        )

    def restore(self, file_id: str) -> str:
        return self._authed_request(
            'POST', f'/files/{file_id}/restore', lambda r: f"Restored: {file_id}", 'restore'
        )

    def delete_permanently(self, file_id: str) -> str:
        return self._authed_request(
            'DELETE', f'/files/{file_id}', lambda r: f"Permanently deleted: {file_id}", 'delete'
        )

    def list_trash(self) -> str:
        def _render(response: httpx.Response) -> str:
            data = response.json()
            folders, files = data['folders'], data['files']
            if not folders and not files:
                return "Trash is empty."

            output = [f"Trash: {len(folders)} folder(s), {len(files)} file(s)\n"]
            for folder in folders:
                output.append(f"  [DIR] {folder['name']}  (ID: {folder['folder_id']}, trashed: {folder['trashed_at']})")
            for file_meta in files:
                output.append(
                    f"  {file_meta['name']}  (ID: {file_meta['file_id']}, "
                    f"{format_file_size(file_meta['size'])}, trashed: {file_meta['trashed_at']})"
                )
            return '\n'.join(output)

        return self._authed_request('GET', '/trash', _render, 'trash listing')

    def empty_trash(self) -> str:
        def _render(response: httpx.Response) -> str:
            count = response.json()['count']
            if count == 0:
                return "Trash was already empty."
            return f"Permanently deleted {count} file(s) from the trash."

        return self._authed_request('DELETE', '/trash', _render, 'empty trash')

    def share(self, file_id: str, enabled: bool = True) -> str:
        def _render(response: httpx.Response) -> str:
            data = response.json()
            if data['is_shared']:
                return f"Share link: {data['share_url']}\nToken: {data['share_token']}"
            return f"Sharing disabled for {file_id}"

        return self._authed_request(
            'POST', f'/files/{file_id}/share', _render, 'share', json={'enabled': enabled}
        )

    def open_share(self, token: str) -> str:
        """
        Show the metadata of a shared file. No login needed.
        """
        try:
            response = self._request_with_retry('GET', '/shared', params={'share': token})
            if response.status_code == 200:
                file_meta = response.json()
                return (
                    f"{file_meta['name']} ({format_file_size(file_meta['size'])}, {file_meta['file_type']})\n"
                    f"Shared since: {file_meta['share_created_at']}"
                )
            return f"Error: {self._format_error(response)}"
        except ConnectionError as e:
            return f"Error: {e}"

    def stats(self) -> str:
        def _render(response: httpx.Response) -> str:
            data = response.json()
            output = [
                f"Users: {data['total_users']}",
                f"Files: {data['total_files']}",
                f"Storage: {format_file_size(data['total_storage'])}",
                "By type:",
            ]
            for entry in data['breakdown_by_category']:
                output.append(f"  {entry['name']:<10} {entry['count']}")
            return '\n'.join(output)

        return self._authed_request('GET', '/admin/stats', _render, 'stats')

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
