"""Versioned route table.

Routes are plain registrations (method, path, version, handler) collected
in a Router and mounted onto the FastAPI app once at startup. The router
decides which handler serves a request; FastAPI only carries the HTTP.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel

from api.presenters import Presenter
from domain.model.errors import RouteNotFound

PARAM_SOURCES = ("query", "body")


@dataclass(frozen=True)
class Route:
    """A single route registration."""
    method: str
    path: str
    version: str
    handler: Callable[..., Any]
    params: Optional[type[BaseModel]] = None
    source: str = "query"
    protected: bool = False
    presenter: Optional[Presenter] = None
    status_code: int = 200
    name: Optional[str] = None


class Router:
    """Holds route registrations and resolves requests to exactly one of them."""

    def __init__(self):
        self.routes: list[Route] = []
        self._index: dict[tuple[str, str, str], Route] = {}

    def add(self, method: str, path: str, handler: Callable[..., Any], *, version: str, **options) -> Route:
        route = Route(method=method.upper(), path=path, version=version, handler=handler, **options)
        if route.source not in PARAM_SOURCES:
            raise ValueError(f"Unknown parameter source {route.source!r} for {method} {path}")

        key = (route.method, route.path, route.version)
        if key in self._index:
            raise ValueError(f"Route already registered: {route.method} {route.path} ({route.version})")

        self._index[key] = route
        self.routes.append(route)
        return route

    def get(self, path: str, handler: Callable[..., Any], **kwargs) -> Route:
        return self.add("GET", path, handler, **kwargs)

    def post(self, path: str, handler: Callable[..., Any], **kwargs) -> Route:
        return self.add("POST", path, handler, **kwargs)

    def patch(self, path: str, handler: Callable[..., Any], **kwargs) -> Route:
        return self.add("PATCH", path, handler, **kwargs)

    def resolve(self, method: str, path: str, version: Optional[str]) -> Route:
        """Return the route for (method, path template, version).

        Raises:
            RouteNotFound: nothing registered for that combination
        """
        route = self._index.get((method.upper(), path, version or ""))
        if route is None:
            raise RouteNotFound(f"No route for {method.upper()} {path}")
        return route

    def paths(self) -> list[str]:
        """Distinct path templates, in registration order."""
        return list(dict.fromkeys(r.path for r in self.routes))

    def methods(self, path: str) -> list[str]:
        return list(dict.fromkeys(r.method for r in self.routes if r.path == path))

    @property
    def versions(self) -> list[str]:
        return sorted({r.version for r in self.routes})


def parse_media_type_version(accept: Optional[str], vendor: str) -> Optional[str]:
    """Pick the version out of ``application/vnd.<vendor>.<version>+json``.

    Returns None when the header names no vendor media type.
    """
    if not accept:
        return None
    pattern = re.compile(rf"application/vnd\.{re.escape(vendor)}\.(v\d+)(?:\+json)?", re.IGNORECASE)
    for media_range in accept.split(","):
        match = pattern.fullmatch(media_range.split(";")[0].strip())
        if match:
            return match.group(1).lower()
    return None
