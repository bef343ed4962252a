"""Request parameter validation against declared pydantic schemas."""

from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel

from domain.model.errors import ValidationError


def _format_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "body"
    return f"{location}: {error['msg']}"


def validate_params(schema: type[BaseModel], raw: Any, strict: bool = True) -> dict:
    """Validate ``raw`` against ``schema`` and return only the declared keys.

    Every offending field is reported, not just the first. With ``strict``
    no value is coerced across kinds (``"5"`` is not an int); query strings
    are validated with ``strict=False`` since every value arrives as text.

    Raises:
        ValidationError: input is not a mapping, or violates the schema
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(["body: must be a JSON object"])

    try:
        params = schema.model_validate(dict(raw), strict=strict)
    except pydantic.ValidationError as e:
        raise ValidationError([_format_error(err) for err in e.errors()])

    return params.model_dump()
