"""
This module defines the Pydantic models used for authentication.
These models are used for request and response validation and serialization.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_serializer, field_validator

from gev_api.common.schemas import ORMModel

MIN_PASSWORD_LENGTH = 6


class UserRegister(BaseModel):
    """
    Represents the request data for registering a new user.
    """
    nome: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    senha: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator('nome')
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Nome é obrigatório")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    senha: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """
    The token received by email and the new password.
    """
    token: str = Field(..., min_length=1)
    nova_senha: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class UserOut(ORMModel):
    """
    Common user fields returned in responses. Never carries the password hash.
    """
    id: int
    nome: str
    email: str
    created_at: Optional[datetime] = None

    @field_serializer('created_at')
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        """Serialize datetime to ISO format string."""
        return value.isoformat() if value else None


class LoginData(BaseModel):
    """
    Represents the login result: the user and a bearer token.
    """
    user: UserOut
    token: str
    token_type: str = "bearer"
    expires_at: datetime

    @field_serializer('expires_at')
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()
