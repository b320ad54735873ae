"""
Pydantic schemas for login and sign-up request/response validation.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator

from authserver.models.user import ProviderType

USERNAME_MAX_LENGTH = 30


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenInfo(BaseModel):
    access_token: str
    refresh_token: str


class LoginResponse(BaseModel):
    """Response schema returned after a successful login."""
    user_id: int
    token_info: TokenInfo

    @classmethod
    def of(cls, user_id: int, access_token: str, refresh_token: str) -> "LoginResponse":
        return cls(
            user_id=user_id,
            token_info=TokenInfo(access_token=access_token, refresh_token=refresh_token),
        )


class SignUpRequest(BaseModel):
    username: EmailStr
    # bcrypt only looks at the first 72 bytes.
    password: str = Field(..., min_length=8, max_length=64)
    provider_type: ProviderType = ProviderType.LOCAL

    @field_validator("username")
    @classmethod
    def username_length(cls, v: str) -> str:
        if len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")
        return v
