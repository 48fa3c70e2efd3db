"""
Pydantic schemas for authentication endpoints.

Registration is a tagged union on ``role``: each role carries its own
required profile fields.
"""
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel


def _check_password(v: str) -> str:
    """Validate password length in bytes (bcrypt limit is 72 bytes)."""
    password_bytes = v.encode("utf-8")
    if len(password_bytes) > 72:
        raise ValueError("Password must be 72 bytes or fewer")
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters")
    return v


class _RegistrationBase(CamelModel):
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., description="Password (6 characters to 72 bytes)")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class JobSeekerRegistration(_RegistrationBase):
    role: Literal["jobseeker"]
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class EmployerRegistration(_RegistrationBase):
    role: Literal["employer"]
    company_name: str = Field(..., min_length=1, max_length=255)
    industry: str = Field(..., min_length=1, max_length=255)
    company_size: Literal["1-10", "11-50", "51-100", "101-500", "501-1000", "1000+"]


RegistrationRequest = Union[JobSeekerRegistration, EmployerRegistration]


class JobSeekerSignupRequest(_RegistrationBase):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password(v)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password(v)


class IdentityResponse(CamelModel):
    id: int
    email: str
    user_type: str = Field(validation_alias="role")
    email_verified: bool
    last_login: Optional[datetime] = Field(None, validation_alias="last_login_at")
    created_at: Optional[datetime] = None
