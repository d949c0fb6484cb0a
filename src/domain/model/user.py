from dataclasses import dataclass
from datetime import datetime
from typing import Any

from email_validator import EmailNotValidError, validate_email

from domain.model.errors import ValidationError, VerificationError

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def normalize_phone(phone: str | None) -> str | None:
    if phone is None:
        return None
    phone = phone.strip()
    return phone or None


@dataclass
class User:
    """Domain model representing an account.

    Either a password account (``is_external=False``, ``password_hash`` set)
    or a Google account (``is_external=True``, ``external_id`` set).
    """
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    email: str | None = None
    phone_number: str | None = None
    password_hash: str | None = None
    bio: str | None = None
    profile_pic: str | None = None
    external_id: str | None = None
    is_external: bool = False

    def check_invariants(self) -> None:
        """Raise ValidationError if the account fields are inconsistent."""
        if not self.email and not self.phone_number:
            raise ValidationError("Either email or phone number is required")
        if not self.name:
            raise ValidationError("Name is required")
        if self.is_external:
            if self.password_hash:
                raise ValidationError("External accounts cannot have a password")
            if not self.external_id:
                raise ValidationError("External accounts require an external id")
        else:
            if not self.password_hash:
                raise ValidationError("Password accounts require a password hash")
            if self.external_id:
                raise ValidationError("Password accounts cannot have an external id")

    def public_view(self) -> dict[str, Any]:
        """User fields that are safe to return to clients."""
        return {
            "id": self.id,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "name": self.name,
            "bio": self.bio,
            "profilePic": self.profile_pic,
            "isExternal": self.is_external,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class SignupCommand:
    """Direct signup input. Never persisted."""
    name: str
    password: str
    email: str | None = None
    phone_number: str | None = None
    bio: str | None = None

    def normalized(self) -> "SignupCommand":
        return SignupCommand(
            name=(self.name or "").strip(),
            password=self.password or "",
            email=normalize_email(self.email),
            phone_number=normalize_phone(self.phone_number),
            bio=(self.bio or "").strip() or None,
        )

    def validate(self) -> None:
        if not self.email and not self.phone_number:
            raise ValidationError("Either email or phone number is required")
        if self.email:
            try:
                validate_email(self.email, check_deliverability=False)
            except EmailNotValidError as e:
                raise ValidationError("Invalid email format") from e
        if not self.name:
            raise ValidationError("Name is required")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )


@dataclass(frozen=True)
class ExternalClaims:
    """Verified profile claims returned by the identity provider."""
    external_id: str
    email: str
    name: str
    picture: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ExternalClaims":
        """Build claims from a userinfo payload, failing on missing fields.

        Google's v3 userinfo endpoint returns ``sub``; the older v2 endpoint
        returns ``id``. Either is accepted.
        """
        if not isinstance(payload, dict):
            raise VerificationError("Identity payload is not an object")

        external_id = _required_claim(payload, "sub") or _required_claim(payload, "id")
        if not external_id:
            raise VerificationError("Identity payload is missing the subject id")
        email = _required_claim(payload, "email")
        if not email:
            raise VerificationError("Identity payload is missing email")
        name = _required_claim(payload, "name")
        if not name:
            raise VerificationError("Identity payload is missing name")

        picture = payload.get("picture")
        if picture is not None and not isinstance(picture, str):
            raise VerificationError("Identity payload has a malformed picture")

        return cls(
            external_id=external_id,
            email=normalize_email(email),
            name=name.strip(),
            picture=picture or None,
        )


def _required_claim(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise VerificationError(f"Identity payload has a malformed {key}")
    return value.strip() or None


@dataclass
class AuthResult:
    """Outcome of a successful signup or login."""
    token: str
    user: User
    created: bool = False
