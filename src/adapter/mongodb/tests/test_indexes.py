"""Tests for index creation and conflict resolution."""

import unittest
from unittest.mock import MagicMock

from pymongo.errors import OperationFailure, PyMongoError

from adapter.mongodb.indexes import create_index_safe, ensure_all_indexes

EMAIL_KEYS = [('email', 1)]


class TestCreateIndexSafe(unittest.TestCase):

    def test_creates_index(self):
        collection = MagicMock()

        self.assertTrue(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))
        collection.create_index.assert_called_once_with(EMAIL_KEYS, name='idx_users_email', unique=True)

    def test_replaces_non_unique_email_index_with_same_name(self):
        collection = MagicMock()
        collection.create_index.side_effect = [OperationFailure('Index already exists with different options'), None]
        collection.index_information.return_value = {
            '_id_': {'key': [('_id', 1)]},
            'idx_users_email': {'key': [('email', 1)]},
        }

        self.assertTrue(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))
        collection.drop_index.assert_called_once_with('idx_users_email')
        self.assertEqual(collection.create_index.call_count, 2)

    def test_renames_index_with_same_keys(self):
        collection = MagicMock()
        collection.create_index.side_effect = [OperationFailure('IndexKeySpecsConflict'), None]
        collection.index_information.return_value = {'email_1': {'key': [('email', 1)]}}

        self.assertTrue(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))
        collection.drop_index.assert_called_once_with('email_1')

    def test_unresolvable_conflict_returns_false(self):
        collection = MagicMock()
        collection.create_index.side_effect = OperationFailure('Index already exists')
        collection.index_information.return_value = {'idx_other': {'key': [('created_at', 1)]}}

        self.assertFalse(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))
        collection.drop_index.assert_not_called()

    def test_other_driver_errors_propagate(self):
        collection = MagicMock()
        collection.create_index.side_effect = PyMongoError('connection reset')

        with self.assertRaises(PyMongoError):
            create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True)


class TestEnsureAllIndexes(unittest.TestCase):

    def test_creates_users_indexes(self):
        collection = MagicMock()
        db = MagicMock()
        db.__getitem__.return_value = collection

        self.assertTrue(ensure_all_indexes(db))
        names = [call.kwargs['name'] for call in collection.create_index.call_args_list]
        self.assertEqual(names, ['idx_users_email', 'idx_users_created_at_id'])

    def test_driver_failure_is_reported(self):
        collection = MagicMock()
        collection.create_index.side_effect = PyMongoError('down')
        db = MagicMock()
        db.__getitem__.return_value = collection

        self.assertFalse(ensure_all_indexes(db))


if __name__ == '__main__':
    unittest.main()
