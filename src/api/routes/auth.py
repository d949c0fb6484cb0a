"""Authentication routes (signup, Google signup, login, me)."""

import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_identity_provider, get_settings, get_token_service, get_user_repo
from api.models import (
    AuthResponse,
    ExternalSignupRequest,
    LoginRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from api.security import get_current_user_required
from domain.model.user import SignupCommand, User
from port.identity_provider import IdentityProvider
from port.user_repository import UserRepository
from services import auth_service
from services.token_service import TokenService
from utils.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    request: SignupRequest,
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
):
    """Register a new user with email or phone number and password.

    Raises:
        400 if validation fails, 409 if the account exists, 500 on hashing failure
    """
    command = SignupCommand(
        email=request.email,
        phone_number=request.phone_number,
        name=request.name,
        password=request.password,
        bio=request.bio,
    )
    result = auth_service.signup(repo, tokens, command, bcrypt_rounds=settings.bcrypt_rounds)
    return AuthResponse(
        message="User created successfully",
        token=result.token,
        user=UserResponse.from_domain(result.user),
    )


@router.post("/external-signup", response_model=TokenResponse)
@router.post("/google-signup", response_model=TokenResponse, include_in_schema=False)
def external_signup(
    request: ExternalSignupRequest,
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Sign up or log in with a Google access token.

    Returns only the token; the user object is not part of this response.

    Raises:
        400 if the token is missing, 401 if Google rejects it
    """
    result = auth_service.external_signup(repo, tokens, identity, request.external_token)
    return TokenResponse(message="Google signup successful", token=result.token)


@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    repo: UserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
):
    """Log in with email or phone number and password.

    Raises:
        400 if fields are missing, 401 if credentials are invalid
    """
    result = auth_service.login(
        repo, tokens,
        email=request.email,
        phone_number=request.phone_number,
        password=request.password,
    )
    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=UserResponse.from_domain(result.user),
    )


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user_required)):
    """Get current authenticated user info."""
    return UserResponse.from_domain(current_user)
