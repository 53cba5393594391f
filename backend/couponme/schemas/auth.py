from pydantic import EmailStr

from couponme.schemas.base import CamelModel
from couponme.schemas.user import UserRead


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(CamelModel):
    refresh_token: str


class AuthResponse(CamelModel):
    user: UserRead
    tokens: TokenPair


class RegisterResponse(CamelModel):
    message: str
    user: UserRead
