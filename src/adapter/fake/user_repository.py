"""In-memory implementation of UserRepository for testing."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from domain.model.errors import DuplicateError, NotFoundError, StoreTimeoutError, ValidationError
from domain.model.user import User
from port.user_repository import PROFILE_FIELDS


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        # Set to make every call raise StoreTimeoutError.
        self.simulate_timeout = False

    def _check_available(self):
        if self.simulate_timeout:
            raise StoreTimeoutError("User store operation timed out")

    def _collides(self, user: User, exclude_id: str | None = None) -> bool:
        for other in self.store.values():
            if other.id == exclude_id:
                continue
            if user.email and other.email == user.email:
                return True
            if user.phone_number and other.phone_number == user.phone_number:
                return True
            if user.external_id and other.external_id == user.external_id:
                return True
        return False

    # ── write operations ─────────────────────────────────────

    def insert(self, user: User) -> User:
        self._check_available()
        user.check_invariants()
        if user.id in self.store or self._collides(user):
            raise DuplicateError("User already exists")
        self.store[user.id] = replace(user)
        return replace(user)

    def update_profile(self, user_id: str, fields: dict[str, Any]) -> User:
        self._check_available()
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        user = self.store.get(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        updated = replace(user, **fields, updated_at=datetime.now(timezone.utc))
        if self._collides(updated, exclude_id=user_id):
            raise DuplicateError("Another account already uses this email")
        self.store[user_id] = updated
        return replace(updated)

    # ── read operations ──────────────────────────────────────

    def find_by_email_or_phone(self, email: str | None, phone: str | None) -> User | None:
        self._check_available()
        for attr, value in (('email', email), ('phone_number', phone)):
            if not value:
                continue
            for user in self.store.values():
                if getattr(user, attr) == value:
                    return replace(user)
        return None

    def find_by_external_id(self, external_id: str) -> User | None:
        self._check_available()
        for user in self.store.values():
            if user.external_id == external_id:
                return replace(user)
        return None

    def get_by_id(self, user_id: str) -> User | None:
        self._check_available()
        user = self.store.get(user_id)
        return replace(user) if user else None
