"""In-memory implementation of UserRepository for testing."""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from domain.model.errors import DuplicateError
from domain.model.user import User

UPDATABLE_FIELDS = frozenset({'first_name', 'last_name', 'password_hash', 'is_admin'})


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        # Stands in for the database's unique index on email.
        self._lock = threading.Lock()

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        email: str,
        password_hash: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        is_admin: bool = False,
    ) -> User:
        with self._lock:
            if any(u.email == email for u in self.store.values()):
                raise DuplicateError("email already taken")

            user_id = uuid.uuid4().hex
            now = datetime.now(timezone.utc)

            user = User(
                id=user_id,
                email=email,
                created_at=now,
                updated_at=now,
                first_name=first_name,
                last_name=last_name,
                password_hash=password_hash,
                is_admin=is_admin,
            )
            self.store[user_id] = user
            return replace(user)

    def update(self, user_id: str, **fields) -> User | None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self._lock:
            user = self.store.get(user_id)
            if not user:
                return None
            for key, value in fields.items():
                setattr(user, key, value)
            user.updated_at = datetime.now(timezone.utc)
            return replace(user)

    def update_last_login(self, user_id: str) -> bool:
        with self._lock:
            user = self.store.get(user_id)
            if not user:
                return False

            now = datetime.now(timezone.utc)
            user.last_login = now
            user.updated_at = now
            return True

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        for user in list(self.store.values()):
            if user.email == email:
                return replace(user)
        return None

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    def list(self, skip: int = 0, limit: int = 25) -> list[User]:
        ordered = sorted(self.store.values(), key=lambda u: u.created_at)
        return [replace(u) for u in ordered[skip:skip + limit]]

    def count(self) -> int:
        return len(self.store)

    def ping(self) -> bool:
        return True
