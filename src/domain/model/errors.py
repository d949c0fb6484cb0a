"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Route handlers catch them and map to appropriate HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class ConflictError(DuplicateError):
    """Account already exists for the submitted email or phone number."""


class AuthenticationError(DomainError):
    """Caller could not be authenticated."""


class InvalidTokenError(DomainError):
    """Session token is malformed, tampered with, or expired."""


class VerificationError(DomainError):
    """External identity token could not be exchanged for valid claims."""


class HashingError(DomainError):
    """Password hashing backend failed or received a malformed hash."""


class InternalError(DomainError):
    """Unexpected failure that is not the caller's fault."""


class StoreError(DomainError):
    """Credential store failed to complete an operation."""


class StoreTimeoutError(StoreError, TimeoutError):
    """Credential store operation exceeded its time budget."""
