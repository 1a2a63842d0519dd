"""Secrets handling: password hashes, API keys and share tokens."""

import secrets
import uuid

import bcrypt

from common.constants import API_KEY_PREFIX
from cloudfire import config


def hash_password(password: str) -> str:
    """
    Returns:
        bcrypt hash of the password, cost taken from CLOUDFIRE_BCRYPT_ROUNDS
    """
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a password against a stored hash. A malformed hash never matches.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def generate_api_key() -> str:
    """
    Returns:
        A fresh key of the form cf_<uuid4>
    """
    return f"{API_KEY_PREFIX}{uuid.uuid4()}"


def generate_share_token() -> str:
    """
    Generate a URL-safe share token with 192 bits of entropy.

    The engine never generates tokens itself; callers enabling a share use
    this helper and hand the result to ``set_share``.
    """
    return secrets.token_urlsafe(24)
