"""FastAPI dependencies shared by the route modules."""

from typing import Optional

from fastapi import Depends, Header, Request

from common.logging_config import get_logger
from cloudfire.engine import StorageEngine
from cloudfire.exceptions import AccountDisabledError, InvalidAPIKeyError, UnauthorizedAccessError
from cloudfire.repositories.user_repository import User
from cloudfire.service_locator import get_engine

logger = get_logger(__name__)


def engine_dependency() -> StorageEngine:
    return get_engine()


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip() or None
    return None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    engine: StorageEngine = Depends(engine_dependency),
) -> User:
    """
    FastAPI dependency to validate the API Key and load the caller.

    Args:
        authorization: Authorization header value (format: "Bearer <api_key>")

    Returns:
        The authenticated user

    Raises:
        InvalidAPIKeyError: If the header is missing, malformed or unknown
        AccountDisabledError: If the account was deactivated after login
    """
    api_key = _extract_bearer_token(authorization)
    if api_key is None:
        raise InvalidAPIKeyError("Missing or malformed authorization header")

    user = await engine.validate_api_key(api_key)
    if user is None:
        raise InvalidAPIKeyError("Invalid API key")
    if not user.is_active:
        raise AccountDisabledError(f"Account '{user.username}' is disabled")

    request.state.user_id = user.user_id
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"Admin endpoint refused for user_id={current_user.user_id}")
        raise UnauthorizedAccessError("Admin privileges required")
    return current_user
