from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Domain model representing an API user."""
    id: str
    email: str
    created_at: datetime
    updated_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    password_hash: str | None = None
    is_admin: bool = False
    last_login: datetime | None = None

    @property
    def full_name(self) -> str | None:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None
