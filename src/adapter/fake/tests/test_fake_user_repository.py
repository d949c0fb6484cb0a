"""Tests for FakeUserRepository — uniqueness, profile updates, timeouts."""

import unittest
from datetime import datetime, timezone

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import DuplicateError, NotFoundError, StoreTimeoutError, ValidationError
from domain.model.user import User

NOW = datetime(2026, 1, 23, 12, 0, 0, tzinfo=timezone.utc)


def _user(user_id='u1', **kwargs) -> User:
    defaults = dict(
        id=user_id, name='A', email='a@x.com', password_hash='$2b$04$hash',
        created_at=NOW, updated_at=NOW,
    )
    defaults.update(kwargs)
    return User(**defaults)


def _google_user(user_id='g1', **kwargs) -> User:
    defaults = dict(
        id=user_id, name='G', email='g@example.com', external_id='google-1',
        is_external=True, created_at=NOW, updated_at=NOW,
    )
    defaults.update(kwargs)
    return User(**defaults)


class TestFakeUserRepository(unittest.TestCase):

    def setUp(self):
        self.repo = FakeUserRepository()

    def test_insert_and_lookup(self):
        self.repo.insert(_user(phone_number='+1555'))
        self.assertEqual(self.repo.find_by_email_or_phone('a@x.com', None).id, 'u1')
        self.assertEqual(self.repo.find_by_email_or_phone(None, '+1555').id, 'u1')
        self.assertIsNone(self.repo.find_by_email_or_phone('b@x.com', None))
        self.assertIsNone(self.repo.find_by_email_or_phone(None, None))

    def test_email_match_takes_precedence_over_phone(self):
        self.repo.insert(_user('phone-user', email=None, phone_number='+1'))
        self.repo.insert(_user('email-user', email='e@x.com'))

        found = self.repo.find_by_email_or_phone('e@x.com', '+1')

        self.assertEqual(found.id, 'email-user')
        self.assertEqual(self.repo.find_by_email_or_phone('none@x.com', '+1').id, 'phone-user')

    def test_unique_email(self):
        self.repo.insert(_user())
        with self.assertRaises(DuplicateError):
            self.repo.insert(_user('u2'))

    def test_unique_phone(self):
        self.repo.insert(_user(email=None, phone_number='+1555'))
        with self.assertRaises(DuplicateError):
            self.repo.insert(_user('u2', email='b@x.com', phone_number='+1555'))

    def test_unique_external_id(self):
        self.repo.insert(_google_user())
        with self.assertRaises(DuplicateError):
            self.repo.insert(_google_user('g2', email='other@example.com'))

    def test_accounts_without_phone_do_not_collide(self):
        self.repo.insert(_user())
        self.repo.insert(_user('u2', email='b@x.com'))
        self.assertEqual(len(self.repo.store), 2)

    def test_insert_checks_invariants(self):
        with self.assertRaises(ValidationError):
            self.repo.insert(_user(password_hash=None))

    def test_update_profile(self):
        self.repo.insert(_google_user())
        updated = self.repo.update_profile('g1', {'name': 'New', 'profile_pic': 'https://p'})
        self.assertEqual(updated.name, 'New')
        self.assertEqual(updated.profile_pic, 'https://p')
        self.assertEqual(updated.external_id, 'google-1')
        self.assertGreater(updated.updated_at, NOW)

    def test_update_profile_rejects_identity_fields(self):
        self.repo.insert(_user())
        with self.assertRaises(ValidationError):
            self.repo.update_profile('u1', {'password_hash': 'x'})
        with self.assertRaises(ValidationError):
            self.repo.update_profile('u1', {'external_id': 'x'})

    def test_update_profile_unknown_id(self):
        with self.assertRaises(NotFoundError):
            self.repo.update_profile('missing', {'name': 'x'})

    def test_returned_users_are_copies(self):
        self.repo.insert(_user())
        self.repo.get_by_id('u1').name = 'Mutated'
        self.assertEqual(self.repo.get_by_id('u1').name, 'A')

    def test_simulated_timeout(self):
        self.repo.simulate_timeout = True
        with self.assertRaises(StoreTimeoutError):
            self.repo.get_by_id('u1')
        with self.assertRaises(TimeoutError):
            self.repo.find_by_external_id('google-1')


if __name__ == '__main__':
    unittest.main()
