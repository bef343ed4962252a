"""Tests for POST /v1/login."""

import unittest
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from adapter.fake.user_repository import FakeUserRepository
from api.config import Settings
from api.main import create_app
from services.auth_service import hash_password


class TestLogin(unittest.TestCase):

    def setUp(self):
        self.now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        self.repo = FakeUserRepository()
        self.user = self.repo.create(email='a@example.com', password_hash=hash_password('Secret123', 4))
        self.app = create_app(
            Settings(jwt_secret_key='test-secret', bcrypt_rounds=4),
            user_repo=self.repo,
            clock=lambda: self.now,
        )
        self.client = TestClient(self.app)

    def test_login_returns_usable_token(self):
        response = self.client.post('/v1/login', json={'email': 'a@example.com', 'password': 'Secret123'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['token_type'], 'bearer')
        self.assertEqual(data['expires_at'], '2026-03-08T09:30:00Z')
        self.assertEqual(data['user']['id'], self.user.id)
        self.assertNotIn('password_hash', data['user'])

        me = self.client.get('/v1/me', headers={'Authorization': f"Bearer {data['token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()['email'], 'a@example.com')

    def test_login_records_last_login(self):
        response = self.client.post('/v1/login', json={'email': 'a@example.com', 'password': 'Secret123'})

        stored = self.repo.get_by_id(self.user.id).last_login
        self.assertIsNotNone(stored)
        self.assertEqual(response.json()['user']['last_login'], stored.isoformat().replace('+00:00', 'Z'))

    def test_password_over_bcrypt_limit_is_invalid_credentials(self):
        long_password = 'Secret123' + 'x' * 91

        known = self.client.post('/v1/login', json={'email': 'a@example.com', 'password': long_password})
        unknown = self.client.post('/v1/login', json={'email': 'who@example.com', 'password': long_password})

        self.assertEqual(known.status_code, 401)
        self.assertEqual(known.json(), {'error': 'Invalid credentials'})
        self.assertEqual(known.content, unknown.content)
        self.assertIsNone(self.repo.get_by_id(self.user.id).last_login)

    def test_wrong_password(self):
        response = self.client.post('/v1/login', json={'email': 'a@example.com', 'password': 'wrong'})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Invalid credentials'})

    def test_wrong_password_and_unknown_email_are_indistinguishable(self):
        wrong_password = self.client.post('/v1/login', json={'email': 'a@example.com', 'password': 'wrong'})
        unknown_email = self.client.post('/v1/login', json={'email': 'who@example.com', 'password': 'wrong'})

        self.assertEqual(wrong_password.status_code, unknown_email.status_code)
        self.assertEqual(wrong_password.content, unknown_email.content)
        self.assertEqual(wrong_password.headers.get('WWW-Authenticate'), unknown_email.headers.get('WWW-Authenticate'))

    def test_missing_fields_all_listed(self):
        response = self.client.post('/v1/login', json={})

        self.assertEqual(response.status_code, 400)
        fields = sorted(e.split(':')[0] for e in response.json()['errors'])
        self.assertEqual(fields, ['email', 'password'])

    def test_login_is_public(self):
        response = self.client.post(
            '/v1/login',
            json={'email': 'a@example.com', 'password': 'Secret123'},
            headers={'Authorization': 'Bearer garbage'},
        )

        self.assertEqual(response.status_code, 200)


if __name__ == '__main__':
    unittest.main()
