"""Auth service — signup, Google signup/login and password login.

Pure business logic with no HTTP dependencies. The store, token service and
identity provider are passed in explicitly.
Raises domain errors that route handlers map to HTTP status codes.
"""

import logging
import uuid
from datetime import datetime, timezone

from domain.model.errors import (
    AuthenticationError,
    ConflictError,
    DuplicateError,
    HashingError,
    InternalError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
    VerificationError,
)
from domain.model.user import (
    AuthResult,
    ExternalClaims,
    SignupCommand,
    User,
    normalize_email,
    normalize_phone,
)
from port.identity_provider import IdentityProvider
from port.user_repository import UserRepository
from services.password_service import BCRYPT_ROUNDS, hash_password, verify_password
from services.token_service import TokenService
from utils.logging import mask_identifier

logger = logging.getLogger(__name__)


def _new_user_id() -> str:
    return uuid.uuid4().hex


def signup(
    repo: UserRepository,
    tokens: TokenService,
    command: SignupCommand,
    bcrypt_rounds: int = BCRYPT_ROUNDS,
) -> AuthResult:
    """Register a password account. Create-only: existing accounts are never updated.

    Raises:
        ValidationError: missing email and phone, missing name, short password
        ConflictError: email or phone number already registered
        InternalError: password hashing failed
    """
    command = command.normalized()
    command.validate()

    existing = repo.find_by_email_or_phone(command.email, command.phone_number)
    if existing:
        logger.warning(
            "Signup rejected: account exists",
            extra={
                "userId": existing.id,
                "identifier": mask_identifier(command.email or command.phone_number),
            },
        )
        raise ConflictError("User already exists with this email or phone number")

    try:
        password_hash = hash_password(command.password, rounds=bcrypt_rounds)
    except HashingError as e:
        logger.error("Password hashing failed", extra={"error": str(e)})
        raise InternalError("Failed to process password") from e

    now = datetime.now(timezone.utc)
    user = User(
        id=_new_user_id(),
        name=command.name,
        email=command.email,
        phone_number=command.phone_number,
        password_hash=password_hash,
        bio=command.bio,
        is_external=False,
        created_at=now,
        updated_at=now,
    )

    try:
        user = repo.insert(user)
    except DuplicateError as e:
        # Another request registered the same email/phone between lookup and insert.
        raise ConflictError("User already exists with this email or phone number") from e

    token = tokens.issue(user.id)
    logger.info("User registered", extra={"userId": user.id})
    return AuthResult(token=token, user=user, created=True)


def external_signup(
    repo: UserRepository,
    tokens: TokenService,
    identity: IdentityProvider,
    external_token: str | None,
) -> AuthResult:
    """Sign up or log in with a Google access token.

    The first call for an external id inserts the account; later calls
    refresh name, email and picture and keep the same id.

    Raises:
        ValidationError: token missing
        AuthenticationError: token rejected by the identity provider
    """
    external_token = (external_token or "").strip()
    if not external_token:
        raise ValidationError("External token is required")

    try:
        claims = identity.exchange(external_token)
    except VerificationError as e:
        logger.warning("External token rejected", extra={"reason": str(e)})
        raise AuthenticationError("Invalid external token") from e

    existing = repo.find_by_external_id(claims.external_id)
    if existing:
        user, created = _refresh_profile(repo, existing.id, claims), False
    else:
        try:
            user, created = repo.insert(_external_user(claims)), True
        except DuplicateError as e:
            # A concurrent request for the same Google account won the insert.
            existing = repo.find_by_external_id(claims.external_id)
            if not existing:
                logger.warning(
                    "External signup collided with a password account",
                    extra={"externalId": claims.external_id},
                )
                raise ConflictError("User already exists with this email") from e
            user, created = _refresh_profile(repo, existing.id, claims), False

    token = tokens.issue(user.id)
    logger.info(
        "External signup successful",
        extra={"userId": user.id, "created": created},
    )
    return AuthResult(token=token, user=user, created=created)


def _external_user(claims: ExternalClaims) -> User:
    now = datetime.now(timezone.utc)
    return User(
        id=_new_user_id(),
        name=claims.name,
        email=claims.email,
        profile_pic=claims.picture,
        external_id=claims.external_id,
        is_external=True,
        created_at=now,
        updated_at=now,
    )


def _refresh_profile(repo: UserRepository, user_id: str, claims: ExternalClaims) -> User:
    try:
        return repo.update_profile(user_id, {
            "name": claims.name,
            "email": claims.email,
            "profile_pic": claims.picture,
        })
    except NotFoundError as e:
        raise InternalError("Failed to update user") from e
    except DuplicateError as e:
        raise ConflictError("User already exists with this email") from e


def login(
    repo: UserRepository,
    tokens: TokenService,
    email: str | None,
    phone_number: str | None,
    password: str | None,
) -> AuthResult:
    """Authenticate a password account by email or phone number.

    Does not reveal whether the account exists.

    Raises:
        ValidationError: identifier or password missing
        AuthenticationError: invalid credentials (deliberately vague)
    """
    email = normalize_email(email)
    phone_number = normalize_phone(phone_number)
    if not email and not phone_number:
        raise ValidationError("Either email or phone number is required")
    if not password:
        raise ValidationError("Password is required")

    user = repo.find_by_email_or_phone(email, phone_number)
    if not user or user.is_external or not user.password_hash:
        logger.warning("Login rejected", extra={"identifier": mask_identifier(email or phone_number)})
        raise AuthenticationError("Invalid credentials")

    try:
        matches = verify_password(password, user.password_hash)
    except HashingError as e:
        logger.error("Stored password hash is unusable", extra={"userId": user.id})
        raise InternalError("Failed to verify password") from e

    if not matches:
        logger.warning("Login rejected", extra={"userId": user.id})
        raise AuthenticationError("Invalid credentials")

    token = tokens.issue(user.id)
    logger.info("User logged in", extra={"userId": user.id})
    return AuthResult(token=token, user=user)


def resolve_user(repo: UserRepository, tokens: TokenService, token: str | None) -> User:
    """Return the user a session token was issued for.

    Raises:
        AuthenticationError: token invalid or expired, or account no longer exists
    """
    try:
        user_id = tokens.verify(token or "")
    except InvalidTokenError as e:
        raise AuthenticationError("Invalid authentication credentials") from e

    user = repo.get_by_id(user_id)
    if not user:
        raise AuthenticationError("User not found")
    return user
