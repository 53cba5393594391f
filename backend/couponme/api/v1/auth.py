from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core.config import settings
from couponme.core.dependencies import get_current_user
from couponme.core.rate_limit import SlidingWindowLimiter
from couponme.db.session import get_session
from couponme.models.user import User
from couponme.schemas.auth import AuthResponse, LoginRequest, RefreshRequest, RegisterResponse, TokenPair
from couponme.schemas.user import UserCreate, UserRead
from couponme.services import auth as auth_service

router = APIRouter(tags=["auth"])

register_rate_limit = SlidingWindowLimiter(settings.auth_rate_limit_register)
login_rate_limit = SlidingWindowLimiter(settings.auth_rate_limit_login)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
@router.post("/auth/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse, include_in_schema=False)
async def register(
    user_in: UserCreate,
    session: AsyncSession = Depends(get_session),
    _: None = Depends(register_rate_limit),
) -> RegisterResponse:
    user = await auth_service.create_user(session, user_in)
    return RegisterResponse(message="User created successfully", user=UserRead.model_validate(user))


@router.post("/auth/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    session: AsyncSession = Depends(get_session),
    _: None = Depends(login_rate_limit),
) -> AuthResponse:
    user = await auth_service.authenticate_user(session, credentials.email, credentials.password)
    tokens = auth_service.issue_tokens_for_user(user)
    return AuthResponse(user=UserRead.model_validate(user), tokens=TokenPair(**tokens))


@router.post("/auth/refresh", response_model=TokenPair)
async def refresh_tokens(
    refresh_request: RefreshRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    user = await auth_service.user_from_refresh_token(session, refresh_request.refresh_token)
    return TokenPair(**auth_service.issue_tokens_for_user(user))


@router.get("/auth/me", response_model=UserRead)
async def read_me(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
