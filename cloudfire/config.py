"""Configuration settings for the CloudFire server."""

import os


DATABASE_PATH = os.environ.get("CLOUDFIRE_DATABASE_PATH", "/app/data/cloudfire.db")

DB_TIMEOUT = float(os.environ.get("CLOUDFIRE_DB_TIMEOUT", "5.0"))

SERVER_HOST = os.environ.get("CLOUDFIRE_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("CLOUDFIRE_PORT", "8000"))

ADMIN_USERNAME = os.environ.get("CLOUDFIRE_ADMIN_USERNAME", "admin")

ADMIN_PASSWORD = os.environ.get("CLOUDFIRE_ADMIN_PASSWORD", "password")

ADMIN_EMAIL = os.environ.get("CLOUDFIRE_ADMIN_EMAIL", "admin@cloudfire.com")

BCRYPT_ROUNDS = int(os.environ.get("CLOUDFIRE_BCRYPT_ROUNDS", "12"))

TRASH_RETENTION_DAYS = int(os.environ.get("CLOUDFIRE_TRASH_RETENTION_DAYS", "30"))
