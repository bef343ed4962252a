"""Tests for Settings."""

import os
import unittest
from datetime import timedelta
from unittest.mock import patch

from api.config import Settings


class TestSettings(unittest.TestCase):

    def test_secret_required(self):
        with self.assertRaises(ValueError) as ctx:
            Settings(jwt_secret_key='')
        self.assertIn('JWT_SECRET_KEY', str(ctx.exception))

    def test_unknown_versioning_strategy(self):
        with self.assertRaises(ValueError):
            Settings(jwt_secret_key='s', versioning='query')

    def test_non_positive_ttl(self):
        with self.assertRaises(ValueError):
            Settings(jwt_secret_key='s', token_ttl=timedelta(0))

    def test_immutable(self):
        settings = Settings(jwt_secret_key='s')
        with self.assertRaises(Exception):
            settings.jwt_secret_key = 'other'

    @patch('api.config.load_dotenv')
    def test_from_env(self, mock_load_dotenv):
        env = {
            'JWT_SECRET_KEY': 'from-env',
            'JWT_EXPIRATION_MINUTES': '15',
            'API_VERSIONING': 'HEADER',
            'API_VENDOR': 'acme',
            'BCRYPT_ROUNDS': '10',
            'MONGO_URL': 'mongodb://db:27017',
            'CORS_ORIGINS': 'https://a.example.com, https://b.example.com',
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        mock_load_dotenv.assert_called_once()
        self.assertEqual(settings.jwt_secret_key, 'from-env')
        self.assertEqual(settings.token_ttl, timedelta(minutes=15))
        self.assertEqual(settings.versioning, 'header')
        self.assertEqual(settings.vendor, 'acme')
        self.assertEqual(settings.bcrypt_rounds, 10)
        self.assertEqual(settings.mongo_url, 'mongodb://db:27017')
        self.assertEqual(settings.cors_origins, ('https://a.example.com', 'https://b.example.com'))

    @patch('api.config.load_dotenv')
    def test_from_env_defaults(self, _):
        with patch.dict(os.environ, {'JWT_SECRET_KEY': 'k'}, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.jwt_algorithm, 'HS256')
        self.assertEqual(settings.token_ttl, timedelta(days=7))
        self.assertEqual(settings.versioning, 'path')
        self.assertIsNone(settings.mongo_url)
        self.assertEqual(settings.cors_origins, ('*',))

    @patch('api.config.load_dotenv')
    def test_from_env_without_secret(self, _):
        with patch.dict(os.environ, {}, clear=True), self.assertRaises(ValueError):
            Settings.from_env()


if __name__ == '__main__':
    unittest.main()
