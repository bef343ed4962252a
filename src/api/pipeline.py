"""Request pipeline for versioned routes.

router -> validator -> auth (protected routes) -> handler -> presenter,
with the error mapper turning any failure into a response.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.config import Settings
from api.errors import error_response
from api.presenters import present
from api.routing import Route, Router, parse_media_type_version
from api.security import Identity, TokenService, authenticate
from api.validation import validate_params
from domain.model.errors import UnauthorizedError, ValidationError
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

VERSION_PATH_PARAM = "api_version"
# nginx's "client closed request"
CLIENT_CLOSED_REQUEST = 499


@dataclass
class HandlerContext:
    """What a resource handler gets besides its validated parameters."""
    users: UserRepository
    settings: Settings
    tokens: TokenService
    identity: Optional[Identity] = None


def requested_version(request: Request, settings: Settings) -> Optional[str]:
    if settings.versioning == "path":
        return request.path_params.get(VERSION_PATH_PARAM)
    accepted = parse_media_type_version(request.headers.get("accept"), settings.vendor)
    return accepted or settings.default_version


async def _raw_params(request: Request, route: Route) -> Any:
    path_params = {k: v for k, v in request.path_params.items() if k != VERSION_PATH_PARAM}
    if route.source == "query":
        return {**request.query_params, **path_params}

    body = await request.body()
    if not body.strip():
        payload: Any = {}
    else:
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError(["body: malformed JSON"])
    if isinstance(payload, dict):
        payload = {**payload, **path_params}
    return payload


async def dispatch(request: Request, router: Router, path: str) -> Response:
    state = request.app.state
    settings: Settings = state.settings

    route = router.resolve(request.method, path, requested_version(request, settings))

    try:
        raw = await _raw_params(request, route)
        params = validate_params(route.params, raw, strict=route.source == "body") if route.params else {}
    except ValidationError as exc:
        return error_response(exc)

    identity = None
    if route.protected:
        try:
            identity = authenticate(request.headers.get("authorization"), state.tokens)
        except UnauthorizedError as exc:
            return error_response(exc)
        request.state.identity = identity

    if await request.is_disconnected():
        logger.info("Client disconnected, request abandoned", extra={"path": request.url.path})
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    context = HandlerContext(users=state.users, settings=settings, tokens=state.tokens, identity=identity)
    result = await run_in_threadpool(route.handler, context, params)

    body = present(result, route.presenter) if route.presenter else result
    return JSONResponse(content=body, status_code=route.status_code)


def _endpoint(router: Router, path: str):
    async def endpoint(request: Request) -> Response:
        try:
            return await dispatch(request, router, path)
        except Exception as exc:
            return error_response(exc)

    return endpoint


def mount_router(app: FastAPI, router: Router, settings: Settings):
    """Add one FastAPI route per (path, method) that dispatches through ``router``."""
    for path in router.paths():
        url = f"/{{{VERSION_PATH_PARAM}}}{path}" if settings.versioning == "path" else path
        for method in router.methods(path):
            names = {r.name for r in router.routes if r.path == path and r.method == method and r.name}
            app.add_api_route(
                url,
                _endpoint(router, path),
                methods=[method],
                name=f"{method.lower()} {path}",
                summary=", ".join(sorted(names)) or None,
                tags=[path.strip("/").split("/")[0] or "root"],
            )
