"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, EmailStr, Field

from otpgate.domain.ports import UserProfile


class SendOtpRequest(BaseModel):
    """Request model for passcode issuance."""

    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=1, description="Chosen password")


class SendOtpResponse(BaseModel):
    """Response model for successful passcode issuance."""

    message: str
    email: str
    expires_in_seconds: int


class RegisterRequest(BaseModel):
    """Request model for completing registration."""

    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=1, description="Chosen password")
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^\d{6}$",
        description="6-digit passcode received by email",
    )


class LoginRequest(BaseModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public user fields. Never includes the password hash."""

    id: str
    name: str
    email: str

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserResponse":
        return cls(id=profile.id, name=profile.name, email=profile.email)


class UserEnvelope(BaseModel):
    """Response model for register and login."""

    message: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
