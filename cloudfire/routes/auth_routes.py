"""Authentication API routes."""

from fastapi import APIRouter, Depends, status

from cloudfire.engine import StorageEngine
from cloudfire.repositories.user_repository import User
from cloudfire.routes.deps import engine_dependency, get_current_user
from cloudfire.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UpgradePlanRequest,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, engine: StorageEngine = Depends(engine_dependency)):
    """
    Register a new user account and log it in.

    Parameters:
        - username: Unique username (must not already exist)
        - password: User password (will be hashed before storage)
        - email: Contact address (optional)

    Returns:
        - api_key: Generated API Key with 'cf_' prefix
        - user_id: UUID of created user

    Raises:
        - 400: Missing username or password
        - 409: Username already exists
    """
    await engine.register(request.username, request.password, request.email)
    user, api_key = await engine.login(request.username, request.password)

    return RegisterResponse(api_key=api_key, user_id=user.user_id)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, engine: StorageEngine = Depends(engine_dependency)):
    """
    Authenticate user and generate new API Key.

    Returns:
        - api_key: New API Key (replaces previous key)

    Raises:
        - 401: Invalid credentials
        - 403: Account disabled
    """
    user, api_key = await engine.login(request.username, request.password)

    return LoginResponse(api_key=api_key, user_id=user.user_id)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return UserResponse.from_user(current_user)


@router.post("/plan", response_model=UserResponse)
async def upgrade_plan(
    request: UpgradePlanRequest,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Switch the caller to another plan; the storage limit follows the plan.
    """
    user = await engine.upgrade_plan(current_user.user_id, request.plan)
    return UserResponse.from_user(user)
