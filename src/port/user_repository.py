from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Implementations own the email uniqueness constraint: ``create`` raises
    DuplicateError instead of the caller checking first.
    """
    def create(
        self,
        email: str,
        password_hash: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        is_admin: bool = False,
    ) -> User:
        """Create a new user atomically. Raise DuplicateError if the email is taken."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def list(self, skip: int = 0, limit: int = 25) -> list[User]:
        """Return users in creation order, oldest first. Ties keep a stable order."""
        ...

    def count(self) -> int:
        """Return the total number of users."""
        ...

    def update(self, user_id: str, **fields) -> User | None:
        """Update profile fields. Return the updated User or None if not found."""
        ...

    def update_last_login(self, user_id: str) -> bool:
        """Update the last login timestamp for a user. Return True if successful."""
        ...

    def ping(self) -> bool:
        """Return True if the backing store is reachable."""
        ...
