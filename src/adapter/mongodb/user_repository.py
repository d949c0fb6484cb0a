"""MongoDB implementation of UserRepository.

Document field names match the existing users collection
(``phone_number``, ``profile_pic``, ``google_id``, ``is_google``) so older
accounts keep working.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from logging import getLogger
from typing import Any

import pymongo
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import (
    DuplicateKeyError,
    ExecutionTimeout,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
    WTimeoutError,
)

from adapter.mongodb.indexes import create_index_safe
from domain.model.errors import (
    DuplicateError,
    NotFoundError,
    StoreError,
    StoreTimeoutError,
    ValidationError,
)
from domain.model.user import User
from port.user_repository import PROFILE_FIELDS
from utils.logging import mask_identifier

logger = getLogger(__name__)

USERS_COLLECTION_NAME = 'users'
DEFAULT_TIMEOUT_SECONDS = 10.0

_TIMEOUT_ERRORS = (ExecutionTimeout, NetworkTimeout, ServerSelectionTimeoutError, WTimeoutError)

# Domain field name -> document field name
_DOC_FIELDS = {
    'email': 'email',
    'phone_number': 'phone_number',
    'name': 'name',
    'password_hash': 'password_hash',
    'bio': 'bio',
    'profile_pic': 'profile_pic',
    'external_id': 'google_id',
    'is_external': 'is_google',
    'created_at': 'created_at',
    'updated_at': 'updated_at',
}


class MongoUserRepository:
    def __init__(self, db: Database, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.collection = db[USERS_COLLECTION_NAME]
        self.timeout = timeout

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection.

        Unique indexes are partial so that accounts without an email, phone
        number or Google id (missing, or stored as an empty string by older
        records) do not collide.
        """
        try:
            results = [
                create_index_safe(
                    self.collection, [(field, 1)], name,
                    unique=True,
                    partialFilterExpression={field: {'$gt': ''}},
                )
                for field, name in (
                    ('email', 'idx_users_email'),
                    ('phone_number', 'idx_users_phone_number'),
                    ('google_id', 'idx_users_google_id'),
                )
            ]
            results.append(
                create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            )
            return all(results)
        except Exception as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── helpers ──────────────────────────────────────────────

    @contextmanager
    def _bounded(self, operation: str, **log_extra):
        """Run a driver call under the time budget and translate its errors."""
        try:
            with pymongo.timeout(self.timeout):
                yield
        except DuplicateKeyError:
            raise
        except PyMongoError as e:
            if isinstance(e, _TIMEOUT_ERRORS) or getattr(e, 'timeout', False):
                logger.error(
                    f"User store {operation} timed out",
                    extra={**log_extra, "timeoutSeconds": self.timeout},
                )
                raise StoreTimeoutError(f"User store {operation} timed out") from e
            logger.error(
                f"User store {operation} failed",
                extra={**log_extra, "error": str(e)[:200]},
            )
            raise StoreError(f"User store {operation} failed") from e

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=str(doc['_id']),
            name=doc['name'],
            email=doc.get('email') or None,
            phone_number=doc.get('phone_number') or None,
            password_hash=doc.get('password_hash') or None,
            bio=doc.get('bio') or None,
            profile_pic=doc.get('profile_pic') or None,
            external_id=doc.get('google_id') or None,
            is_external=bool(doc.get('is_google', False)),
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
        )

    @staticmethod
    def _id_filter(user_id: str) -> dict:
        """Match documents keyed by an ObjectId (older records) or by a string id."""
        if ObjectId.is_valid(user_id):
            return {'_id': ObjectId(user_id)}
        return {'_id': user_id}

    def _to_document(self, user: User) -> dict:
        """Convert User to a document, omitting unset optional fields."""
        doc: dict[str, Any] = {'_id': user.id}
        for attr, key in _DOC_FIELDS.items():
            value = getattr(user, attr)
            if value is not None:
                doc[key] = value
        return doc

    # ── read operations ──────────────────────────────────────

    def find_by_email_or_phone(self, email: str | None, phone: str | None) -> User | None:
        """Find a user by email or phone number. Return User or None if not found.

        The email is looked up first; the phone number is only consulted when
        no account has that email.
        """
        doc = None
        if email:
            with self._bounded("lookup", email=mask_identifier(email)):
                doc = self.collection.find_one({'email': email})
        if doc is None and phone:
            with self._bounded("lookup", phone=mask_identifier(phone)):
                doc = self.collection.find_one({'phone_number': phone})
        return self._to_domain(doc) if doc else None

    def find_by_external_id(self, external_id: str) -> User | None:
        """Find a user by Google id. Return User or None if not found."""
        with self._bounded("lookup", externalId=external_id):
            doc = self.collection.find_one({'google_id': external_id})
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        with self._bounded("lookup", userId=user_id):
            doc = self.collection.find_one(self._id_filter(user_id))
        return self._to_domain(doc) if doc else None

    # ── write operations ─────────────────────────────────────

    def insert(self, user: User) -> User:
        """Insert a new user. Raise DuplicateError on a unique key collision."""
        user.check_invariants()
        doc = self._to_document(user)
        try:
            with self._bounded("insert", userId=user.id):
                self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            logger.warning("User creation failed: duplicate key", extra={"userId": user.id})
            raise DuplicateError("User already exists") from e

        logger.info("User created", extra={"userId": user.id, "isExternal": user.is_external})
        return user

    def update_profile(self, user_id: str, fields: dict[str, Any]) -> User:
        """Update profile fields and updated_at. Return the updated User."""
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        to_set: dict[str, Any] = {'updated_at': datetime.now(timezone.utc)}
        to_unset: dict[str, str] = {}
        for attr, value in fields.items():
            if value is None:
                to_unset[_DOC_FIELDS[attr]] = ''
            else:
                to_set[_DOC_FIELDS[attr]] = value

        update: dict[str, Any] = {'$set': to_set}
        if to_unset:
            update['$unset'] = to_unset

        try:
            with self._bounded("update", userId=user_id):
                doc = self.collection.find_one_and_update(
                    self._id_filter(user_id),
                    update,
                    return_document=ReturnDocument.AFTER,
                )
        except DuplicateKeyError as e:
            logger.warning("Profile update collided with another account", extra={"userId": user_id})
            raise DuplicateError("Another account already uses this email") from e

        if doc is None:
            raise NotFoundError(f"User {user_id} not found")
        logger.debug("Updated user profile", extra={"userId": user_id, "fields": sorted(fields)})
        return self._to_domain(doc)
