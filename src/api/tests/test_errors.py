"""Tests for domain error → HTTP status mapping."""

import unittest

from api.errors import status_for
from domain.model.errors import (
    AuthenticationError,
    ConflictError,
    DuplicateError,
    HashingError,
    InternalError,
    InvalidTokenError,
    NotFoundError,
    StoreError,
    StoreTimeoutError,
    ValidationError,
    VerificationError,
)


class TestStatusFor(unittest.TestCase):

    def test_client_errors(self):
        self.assertEqual(status_for(ValidationError('x')), 400)
        self.assertEqual(status_for(ConflictError('x')), 409)
        self.assertEqual(status_for(DuplicateError('x')), 409)
        self.assertEqual(status_for(AuthenticationError('x')), 401)
        self.assertEqual(status_for(InvalidTokenError('x')), 401)
        self.assertEqual(status_for(VerificationError('x')), 401)

    def test_server_errors(self):
        self.assertEqual(status_for(StoreTimeoutError('x')), 503)
        self.assertEqual(status_for(StoreError('x')), 500)
        self.assertEqual(status_for(InternalError('x')), 500)
        self.assertEqual(status_for(HashingError('x')), 500)

    def test_not_found_is_never_surfaced_as_404(self):
        self.assertEqual(status_for(NotFoundError('x')), 500)

    def test_store_timeout_is_builtin_timeout(self):
        self.assertIsInstance(StoreTimeoutError('x'), TimeoutError)


if __name__ == '__main__':
    unittest.main()
