"""Tests for users index maintenance against a mocked collection."""

import unittest
from unittest.mock import MagicMock, call

from pymongo.errors import OperationFailure

from adapter.mongodb.indexes import (
    INDEX_OPTIONS_CONFLICT,
    create_index_safe,
    drop_superseded_unique,
    index_drift,
)

EMAIL_KEYS = [('email', 1)]
EMAIL_FILTER = {'email': {'$gt': ''}}


def _collection(indexes: dict) -> MagicMock:
    collection = MagicMock()
    collection.index_information.return_value = {'_id_': {'key': [('_id', 1)]}, **indexes}
    return collection


class TestCreateIndexSafe(unittest.TestCase):

    def test_creates_missing_index(self):
        collection = _collection({})
        self.assertTrue(create_index_safe(
            collection, EMAIL_KEYS, 'idx_users_email', unique=True, partialFilterExpression=EMAIL_FILTER,
        ))
        collection.create_index.assert_called_once_with(
            EMAIL_KEYS, name='idx_users_email', unique=True, partialFilterExpression=EMAIL_FILTER,
        )
        collection.drop_index.assert_not_called()

    def test_drops_plain_unique_index_left_by_older_deployments(self):
        collection = _collection({'email_1': {'key': [('email', 1)], 'unique': True}})

        create_index_safe(
            collection, EMAIL_KEYS, 'idx_users_email', unique=True, partialFilterExpression=EMAIL_FILTER,
        )

        collection.drop_index.assert_called_once_with('email_1')
        collection.create_index.assert_called_once()

    def test_keeps_matching_and_non_unique_indexes(self):
        collection = _collection({
            'idx_users_email': {'key': [('email', 1)], 'unique': True, 'partialFilterExpression': EMAIL_FILTER},
            'email_lookup': {'key': [('email', 1)]},
        })

        create_index_safe(
            collection, EMAIL_KEYS, 'idx_users_email', unique=True, partialFilterExpression=EMAIL_FILTER,
        )

        collection.drop_index.assert_not_called()

    def test_options_conflict_replaces_existing_index(self):
        collection = _collection({'idx_users_email': {'key': [('email', 1)], 'sparse': True}})
        collection.create_index.side_effect = [
            OperationFailure('Index with name: idx_users_email already exists with different options',
                             code=INDEX_OPTIONS_CONFLICT),
            'idx_users_email',
        ]

        with self.assertLogs('adapter.mongodb.indexes', level='WARNING') as logs:
            self.assertTrue(create_index_safe(
                collection, EMAIL_KEYS, 'idx_users_email', unique=True, partialFilterExpression=EMAIL_FILTER,
            ))

        collection.drop_index.assert_called_once_with('idx_users_email')
        self.assertEqual(collection.create_index.call_count, 2)
        self.assertEqual(
            collection.create_index.call_args,
            call(EMAIL_KEYS, name='idx_users_email', unique=True, partialFilterExpression=EMAIL_FILTER),
        )
        self.assertEqual(logs.records[-1].drift, ['unique', 'partialFilterExpression'])

    def test_unexplained_conflict_returns_false(self):
        collection = _collection({})
        collection.create_index.side_effect = OperationFailure(
            'already exists with different options', code=INDEX_OPTIONS_CONFLICT,
        )

        self.assertFalse(create_index_safe(collection, [('created_at', -1)], 'idx_users_created_at'))
        collection.drop_index.assert_not_called()

    def test_other_failures_propagate(self):
        collection = _collection({})
        collection.create_index.side_effect = OperationFailure('not authorized', code=13)

        with self.assertRaises(OperationFailure):
            create_index_safe(collection, [('created_at', -1)], 'idx_users_created_at')


class TestDropSupersededUnique(unittest.TestCase):

    def test_returns_dropped_names(self):
        collection = _collection({
            'phone_number_1': {'key': [('phone_number', 1)], 'unique': True},
            'email_1': {'key': [('email', 1)], 'unique': True},
        })

        dropped = drop_superseded_unique(
            collection, [('phone_number', 1)], 'idx_users_phone_number', {'phone_number': {'$gt': ''}},
        )

        self.assertEqual(dropped, ['phone_number_1'])


class TestIndexDrift(unittest.TestCase):

    def test_reports_differing_parts(self):
        info = {'key': [('email', 1)], 'unique': True}
        self.assertEqual(
            index_drift(info, EMAIL_KEYS, {'unique': True, 'partialFilterExpression': EMAIL_FILTER}),
            ['partialFilterExpression'],
        )
        self.assertEqual(index_drift(info, [('email', -1)], {'unique': True}), ['key'])


if __name__ == '__main__':
    unittest.main()
