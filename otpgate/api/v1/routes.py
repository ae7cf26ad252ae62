"""
API v1 routes.

Defines REST endpoints for OTP registration and password login.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from otpgate.api.dependencies import get_login_service, get_registration_service
from otpgate.api.models import (
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    SendOtpRequest,
    SendOtpResponse,
    UserEnvelope,
    UserResponse,
)
from otpgate.config.settings import Settings, get_settings
from otpgate.domain.exceptions import (
    ConflictError,
    InvalidChallengeError,
    InvalidCredentialsError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from otpgate.domain.login import LoginService
from otpgate.domain.registration import RegistrationService

router = APIRouter(tags=["v1"])


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=str(exc),
    )


@router.post(
    "/send-otp",
    response_model=SendOtpResponse,
    responses={
        409: {"model": ErrorResponse, "description": "User already exists"},
        422: {"description": "Validation error"},
        502: {"model": ErrorResponse, "description": "Passcode could not be sent"},
    },
    summary="Send a registration passcode",
    description="Submit name, email and password. A 6-digit passcode "
    "is sent to the email address.",
)
def send_otp(
    request_data: SendOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_settings),
) -> SendOtpResponse:
    """
    Issue a passcode and mail it.

    - **name**: Display name
    - **email**: Address to verify
    - **password**: Chosen password
    """
    try:
        normalized_email = service.issue_challenge(
            request_data.name, request_data.email, request_data.password
        )
    except ValidationError as e:
        raise _unprocessable(e) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from None
    except NotificationError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send verification code",
        ) from None
    return SendOtpResponse(
        message="OTP sent to email",
        email=normalized_email,
        expires_in_seconds=settings.otp_ttl_seconds,
    )


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired code"},
        409: {"model": ErrorResponse, "description": "User already exists"},
        422: {"description": "Validation error"},
    },
    summary="Complete registration with the passcode",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> UserEnvelope:
    """
    Verify the passcode and create the account.

    - **code**: 6-digit passcode from email
    """
    try:
        profile = service.complete_registration(
            request_data.name,
            request_data.email,
            request_data.password,
            request_data.code,
        )
    except ValidationError as e:
        raise _unprocessable(e) from None
    except InvalidChallengeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired code",
        ) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from None
    return UserEnvelope(
        message="User registered successfully",
        user=UserResponse.from_profile(profile),
    )


@router.post(
    "/login",
    response_model=UserEnvelope,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "User not found"},
        422: {"description": "Validation error"},
    },
    summary="Log in with email and password",
    description="Returns the user's public fields. No session or token is issued.",
)
def login(
    request_data: LoginRequest,
    service: LoginService = Depends(get_login_service),
    settings: Settings = Depends(get_settings),
) -> UserEnvelope:
    """
    Check the password for a registered email.

    With UNIFORM_LOGIN_ERRORS enabled, unknown email and wrong password
    return the same 401 so the response does not reveal registration.
    """
    try:
        profile = service.authenticate(request_data.email, request_data.password)
    except ValidationError as e:
        raise _unprocessable(e) from None
    except NotFoundError:
        if settings.uniform_login_errors:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            ) from None
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from None
    except InvalidCredentialsError:
        detail = "Invalid email or password" if settings.uniform_login_errors else "Invalid password"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        ) from None
    return UserEnvelope(
        message="Login successful",
        user=UserResponse.from_profile(profile),
    )
