"""User service: signup, listing and profile updates.

Operates on the UserRepository port only. Email uniqueness is left to the
repository so that concurrent signups cannot both succeed.
"""

import math
from dataclasses import dataclass

from domain.model.errors import NotFoundError, PermissionDeniedError
from domain.model.user import User
from port.user_repository import UserRepository
from services.auth_service import BCRYPT_ROUNDS, hash_password, validate_password


@dataclass
class Page:
    """One page of an ordered listing."""
    items: list
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.total else 0


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(
    repo: UserRepository,
    email: str,
    password: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """Create a user. A user without a password cannot log in.

    Raises:
        ValidationError: password does not meet strength requirements
        DuplicateError: email already taken
    """
    password_hash = None
    if password is not None:
        validate_password(password)
        password_hash = hash_password(password, rounds)

    return repo.create(
        email=normalize_email(email),
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
    )


def list_users(repo: UserRepository, page: int = 1, per_page: int = 25) -> Page:
    """Return one page of users in creation order."""
    skip = (page - 1) * per_page
    return Page(
        items=repo.list(skip=skip, limit=per_page),
        page=page,
        per_page=per_page,
        total=repo.count(),
    )


def get_user(repo: UserRepository, user_id: str) -> User:
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_acting_user(repo: UserRepository, subject: str) -> User:
    """Resolve the user behind a verified token.

    A valid token whose subject no longer exists grants nothing.
    """
    user = repo.get_by_id(subject)
    if user is None:
        raise PermissionDeniedError("Unknown account")
    return user


def update_user(
    repo: UserRepository,
    actor: User,
    user_id: str,
    changes: dict,
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """Apply a profile update on behalf of ``actor``.

    Users may edit themselves; admins may edit anyone.

    Raises:
        PermissionDeniedError: actor may not edit this user
        NotFoundError: user does not exist
        ValidationError: new password is too weak
    """
    if actor.id != user_id and not actor.is_admin:
        raise PermissionDeniedError("You may only update your own profile")

    fields = {k: v for k, v in changes.items() if k in ("first_name", "last_name")}
    password = changes.get("password")
    if password is not None:
        validate_password(password)
        fields["password_hash"] = hash_password(password, rounds)

    user = repo.update(user_id, **fields) if fields else repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
