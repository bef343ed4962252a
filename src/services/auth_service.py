"""Auth service: password hashing and credential checks.

Pure business logic with no HTTP dependencies.
Raises domain errors that the API error mapper turns into HTTP responses.
"""

import re
from functools import lru_cache

import bcrypt

from domain.model.errors import UnauthorizedError, ValidationError
from domain.model.user import User
from port.user_repository import UserRepository

BCRYPT_ROUNDS = 12
# bcrypt refuses longer secrets
MAX_PASSWORD_BYTES = 72
INVALID_CREDENTIALS = "Invalid credentials"


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> bytes:
    """Hash checked when login fails early, so every failure path costs one bcrypt run."""
    return bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=rounds))


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Constant-time check of ``plain`` against a bcrypt hash."""
    secret = plain.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(secret, hashed.encode("utf-8"))


def validate_password(password: str) -> None:
    """Raise ValidationError listing every strength rule the password breaks."""
    problems = []
    if len(password) < 8:
        problems.append("password: must be at least 8 characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        problems.append(f"password: must be at most {MAX_PASSWORD_BYTES} bytes")
    if not re.search(r"[A-Z]", password):
        problems.append("password: must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("password: must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("password: must contain at least one number")
    if problems:
        raise ValidationError(problems)


def authenticate(repo: UserRepository, email: str, password: str, rounds: int = BCRYPT_ROUNDS) -> User:
    """Authenticate a user by email and password.

    Returns the authenticated User as stored after the login was recorded.
    Unknown email, missing password hash, over-long password and wrong
    password all raise the same error.

    Raises:
        UnauthorizedError: invalid credentials (deliberately vague)
    """
    user = repo.get_by_email(email.strip().lower())
    secret = password.encode("utf-8")

    if user is None or not user.password_hash or len(secret) > MAX_PASSWORD_BYTES:
        bcrypt.checkpw(secret[:MAX_PASSWORD_BYTES], _dummy_hash(rounds))
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        raise UnauthorizedError(INVALID_CREDENTIALS)

    # Login succeeds even if the timestamp write fails
    if repo.update_last_login(user.id):
        user = repo.get_by_id(user.id) or user
    return user
