"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from domain.model.user import User


def _blank_to_none(value):
    """Treat a blank email as absent so the phone-only path still applies."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class SignupRequest(BaseModel):
    """Request model for direct signup."""
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    name: str = ""
    password: str = ""
    bio: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, value):
        return _blank_to_none(value)


class ExternalSignupRequest(BaseModel):
    """Request model for Google signup/login."""
    model_config = ConfigDict(populate_by_name=True)

    external_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("externalToken", "googleToken", "external_token"),
    )


class LoginRequest(BaseModel):
    """Request model for password login."""
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    password: str = ""

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, value):
        return _blank_to_none(value)


class UserResponse(BaseModel):
    """Public user view (never includes the password hash)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    name: str
    bio: Optional[str] = None
    profile_pic: Optional[str] = Field(None, alias="profilePic")
    is_external: bool = Field(False, alias="isExternal")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(**user.public_view())


class AuthResponse(BaseModel):
    """Response model for signup and login."""
    message: str
    token: str
    user: UserResponse


class TokenResponse(BaseModel):
    """Response model for Google signup/login."""
    message: str
    token: str
