"""Login handler."""

import logging
from dataclasses import dataclass
from datetime import datetime

from api.models import LoginRequest
from api.pipeline import HandlerContext
from api.presenters import ACCESS_TOKEN
from api.routing import Router
from domain.model.user import User
from services import auth_service

logger = logging.getLogger(__name__)


@dataclass
class AccessToken:
    token: str
    expires_at: datetime
    user: User
    token_type: str = "bearer"


def login(ctx: HandlerContext, params: dict) -> AccessToken:
    """Exchange email and password for a bearer token."""
    user = auth_service.authenticate(
        ctx.users, params["email"], params["password"], rounds=ctx.settings.bcrypt_rounds
    )
    token, expires_at = ctx.tokens.create_access_token(user.id)

    logger.info("User logged in", extra={"userId": user.id})
    return AccessToken(token=token, expires_at=expires_at, user=user)


def register(router: Router, version: str = "v1"):
    router.post("/login", login, version=version, params=LoginRequest,
                source="body", presenter=ACCESS_TOKEN, name="Login")
