"""Allow-list presenters that turn domain objects into response bodies.

A presenter is declared once at import time as a list of fields. Only those
fields ever reach the client; credential fields cannot be declared at all.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence, Union

from domain.model.errors import PresentationCycleError

SENSITIVE_FIELDS = frozenset({"password_hash", "password"})


@dataclass(frozen=True)
class Field:
    """One allow-listed output field.

    ``source`` names the attribute to read (defaults to ``name``), ``getter``
    computes the value instead, and ``presenter`` presents a nested
    association (a sequence of them when ``many`` is set).
    """
    name: str
    source: Optional[str] = None
    getter: Optional[Callable[[Any], Any]] = None
    presenter: Optional["Presenter"] = None
    many: bool = False


class Presenter:
    def __init__(self, name: str, fields: Sequence[Union[Field, str]]):
        normalized = [f if isinstance(f, Field) else Field(f) for f in fields]

        names = [f.name for f in normalized]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"{name}: duplicate fields {sorted(duplicates)}")

        for f in normalized:
            if f.name in SENSITIVE_FIELDS or (f.source or "") in SENSITIVE_FIELDS:
                raise ValueError(f"{name}: field {f.name!r} may not be exposed")
            if f.getter is not None and f.source is not None:
                raise ValueError(f"{name}: field {f.name!r} has both source and getter")

        self.name = name
        self.fields: tuple[Field, ...] = tuple(normalized)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __repr__(self) -> str:
        return f"Presenter({self.name!r})"


def _read(entity: Any, attr: str) -> Any:
    if isinstance(entity, Mapping):
        return entity.get(attr)
    return getattr(entity, attr)


def _render(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    if isinstance(value, Mapping):
        return {k: _render(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_render(v) for v in value]
    return value


def present(entity: Any, presenter: Presenter, _ancestors: tuple[int, ...] = ()) -> Optional[dict]:
    """Project ``entity`` through ``presenter``.

    Raises:
        PresentationCycleError: ``entity`` is already being presented by an
            enclosing presenter
    """
    if entity is None:
        return None

    marker = id(entity)
    if marker in _ancestors:
        raise PresentationCycleError(f"cyclic presentation in {presenter.name}")
    ancestors = _ancestors + (marker,)

    output = {}
    for field in presenter.fields:
        if field.getter is not None:
            value = field.getter(entity)
        else:
            value = _read(entity, field.source or field.name)

        if field.presenter is None:
            output[field.name] = _render(value)
        elif field.many:
            output[field.name] = [present(item, field.presenter, ancestors) for item in value or ()]
        else:
            output[field.name] = present(value, field.presenter, ancestors)
    return output


USER = Presenter("User", [
    "id",
    "email",
    "first_name",
    "last_name",
    Field("full_name", getter=lambda user: user.full_name),
    "is_admin",
    "created_at",
    "updated_at",
    "last_login",
])

USER_PAGE = Presenter("UserPage", [
    Field("users", source="items", presenter=USER, many=True),
    Field("meta", getter=lambda page: {
        "page": page.page,
        "per_page": page.per_page,
        "total": page.total,
        "total_pages": page.total_pages,
    }),
])

ACCESS_TOKEN = Presenter("AccessToken", [
    "token",
    "token_type",
    "expires_at",
    Field("user", presenter=USER),
])
