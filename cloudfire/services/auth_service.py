"""Authentication service for business logic."""

import sqlite3
from typing import List, Optional, Tuple

from common.constants import ENTERPRISE_STORAGE_LIMIT, FREE_STORAGE_LIMIT, PLAN_STORAGE_LIMITS
from common.logging_config import get_logger
from common.types import Plan, Role
from cloudfire import config
from cloudfire.auth import generate_api_key, hash_password, verify_password
from cloudfire.exceptions import (
    AccountDisabledError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from cloudfire.repositories.user_repository import User, UserRepository
from cloudfire.utils import generate_uuid, utcnow

logger = get_logger(__name__)


class AuthService:
    def __init__(self):
        self.user_repo = UserRepository()

    async def register_user(
        self,
        username: str,
        password: str,
        email: str = "",
        role: Role = Role.USER,
        plan: Plan = Plan.FREE,
        storage_limit: int = FREE_STORAGE_LIMIT,
        user_id: Optional[str] = None,
    ) -> User:
        logger.info(f"Attempting to register user: {username}")
        if not username or not password:
            raise ValidationError("Username and password are required")
        if storage_limit <= 0:
            raise ValidationError("Storage limit must be positive")

        existing_user = await self.user_repo.get_by_username(username)
        if existing_user is not None:
            logger.warning(f"Registration failed: username '{username}' already exists")
            raise DuplicateIdentityError(f"Username '{username}' already exists")

        user = User(
            user_id=user_id or generate_uuid(),
            username=username,
            password_hash=hash_password(password),
            email=email,
            role=Role(role).value,
            plan=Plan(plan).value,
            storage_used=0,
            storage_limit=storage_limit,
            is_active=True,
            created_at=utcnow(),
        )

        try:
            await self.user_repo.create_user(user)
        except sqlite3.IntegrityError:
            logger.warning(f"Registration failed due to integrity error: username '{username}'")
            raise DuplicateIdentityError(f"Username '{username}' already exists")

        logger.info(f"Successfully registered user: {username} [user_id={user.user_id}]")
        return user

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        """
        Check a username/password pair.

        Returns:
            The user when the password matches and the account is active,
            None on unknown username or wrong password

        Raises:
            AccountDisabledError: If the password matches a deactivated account
        """
        user = await self.user_repo.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.debug(f"Authentication failed for username '{username}'")
            return None

        if not user.is_active:
            logger.warning(f"Authentication rejected: account '{username}' is disabled")
            raise AccountDisabledError(f"Account '{username}' is disabled")

        return user

    async def login_user(self, username: str, password: str) -> Tuple[User, str]:
        logger.info(f"Login attempt for user: {username}")
        user = await self.authenticate(username, password)
        if user is None:
            logger.warning(f"Login failed: invalid credentials for username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        new_api_key = generate_api_key()
        await self.user_repo.update_api_key(user.user_id, new_api_key)
        user.api_key = new_api_key

        logger.info(f"Successfully logged in user: {username} [user_id={user.user_id}]")
        return user, new_api_key

    async def validate_api_key(self, api_key: str) -> Optional[User]:
        logger.debug("Validating API key")
        user = await self.user_repo.get_by_api_key(api_key)
        if user is None:
            logger.warning("API key validation failed: invalid key")
            return None
        logger.debug(f"API key validated for user_id={user.user_id}")
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.user_repo.get_by_user_id(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self.user_repo.get_by_username(username)

    async def list_users(self) -> List[User]:
        return await self.user_repo.get_all_users()

    async def update_user(self, user: User) -> User:
        if user.storage_limit <= 0:
            raise ValidationError("Storage limit must be positive")
        updated = await self.user_repo.update_user(user)
        if updated is None:
            raise NotFoundError(f"User '{user.username}' not found")
        return updated

    async def edit_user(
        self,
        username: str,
        email: Optional[str] = None,
        role: Optional[Role] = None,
        plan: Optional[Plan] = None,
        storage_limit: Optional[int] = None,
        is_active: Optional[bool] = None,
        password: Optional[str] = None,
    ) -> User:
        """
        Apply an admin's partial edit to a user record.

        Changing the plan without an explicit storage_limit also moves the
        limit to the plan's default.
        """
        user = await self.user_repo.get_by_username(username)
        if user is None:
            raise NotFoundError(f"User '{username}' not found")

        if email is not None:
            user.email = email
        if role is not None:
            user.role = Role(role).value
        if plan is not None:
            user.plan = Plan(plan).value
            if storage_limit is None:
                user.storage_limit = PLAN_STORAGE_LIMITS[user.plan]
        if storage_limit is not None:
            user.storage_limit = storage_limit
        if is_active is not None:
            user.is_active = is_active
        if password:
            user.password_hash = hash_password(password)

        updated = await self.update_user(user)
        logger.info(f"User edited by admin: {username}")
        return updated

    async def upgrade_plan(self, user_id: str, plan: Plan) -> User:
        user = await self.user_repo.get_by_user_id(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")

        user.plan = Plan(plan).value
        user.storage_limit = PLAN_STORAGE_LIMITS[user.plan]
        user = await self.update_user(user)

        logger.info(f"Plan changed for {user.username}: {user.plan} (limit={user.storage_limit})")
        return user

    async def delete_user(self, username: str) -> bool:
        deleted = await self.user_repo.delete_by_username(username)
        if not deleted:
            logger.debug(f"Delete skipped, user not found: {username}")
        return deleted

    async def seed_admin(self) -> User:
        """
        Make sure the configured admin account exists with admin defaults.

        An existing account keeps its id, storage_used and API key; role, plan,
        limit, email and active flag are reset, and the password is rehashed
        only when it no longer matches the configured one.
        """
        admin = await self.user_repo.get_by_username(config.ADMIN_USERNAME)

        if admin is None:
            try:
                admin = await self.register_user(
                    username=config.ADMIN_USERNAME,
                    password=config.ADMIN_PASSWORD,
                    email=config.ADMIN_EMAIL,
                    role=Role.ADMIN,
                    plan=Plan.ENTERPRISE,
                    storage_limit=ENTERPRISE_STORAGE_LIMIT,
                    user_id=config.ADMIN_USERNAME,
                )
                logger.info(f"Admin account created: {admin.username}")
                return admin
            except DuplicateIdentityError:
                admin = await self.user_repo.get_by_username(config.ADMIN_USERNAME)
                if admin is None:
                    raise

        admin.email = config.ADMIN_EMAIL
        admin.role = Role.ADMIN.value
        admin.plan = Plan.ENTERPRISE.value
        admin.storage_limit = ENTERPRISE_STORAGE_LIMIT
        admin.is_active = True
        if not verify_password(config.ADMIN_PASSWORD, admin.password_hash):
            admin.password_hash = hash_password(config.ADMIN_PASSWORD)

        admin = await self.update_user(admin)
        logger.info(f"Admin account reset to defaults: {admin.username}")
        return admin
