from typing import Any, Protocol
from domain.model.user import User

# Fields update_profile() is allowed to touch. Identity and password fields
# are never mutated after creation.
PROFILE_FIELDS = frozenset({"name", "email", "profile_pic"})


class UserRepository(Protocol):
    """Protocol defining the interface for credential storage.

    Every operation is time-bounded and raises StoreTimeoutError instead of
    blocking indefinitely.
    """
    def find_by_email_or_phone(self, email: str | None, phone: str | None) -> User | None:
        """Find a user by email or phone number. Return User or None if not found."""
        ...

    def find_by_external_id(self, external_id: str) -> User | None:
        """Find a user by external identity id. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def insert(self, user: User) -> User:
        """Persist a new user. Raise DuplicateError on email/phone/external id collision."""
        ...

    def update_profile(self, user_id: str, fields: dict[str, Any]) -> User:
        """Update profile fields and updated_at. Raise NotFoundError for unknown ids."""
        ...
