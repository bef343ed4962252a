"""User resource handlers."""

import logging

from api.models import CreateUserRequest, ListUsersParams, UpdateUserRequest, UserPathParams
from api.pipeline import HandlerContext
from api.presenters import USER, USER_PAGE
from api.routing import Router
from domain.model.user import User
from services import user_service
from services.user_service import Page

logger = logging.getLogger(__name__)


def list_users(ctx: HandlerContext, params: dict) -> Page:
    return user_service.list_users(ctx.users, page=params["page"], per_page=params["per_page"])


def show_user(ctx: HandlerContext, params: dict) -> User:
    return user_service.get_user(ctx.users, params["user_id"])


def create_user(ctx: HandlerContext, params: dict) -> User:
    user = user_service.create_user(
        ctx.users,
        email=params["email"],
        password=params["password"],
        first_name=params["first_name"],
        last_name=params["last_name"],
        rounds=ctx.settings.bcrypt_rounds,
    )
    logger.info("User registered", extra={"userId": user.id})
    return user


def update_user(ctx: HandlerContext, params: dict) -> User:
    actor = user_service.get_acting_user(ctx.users, ctx.identity.subject)
    changes = {k: v for k, v in params.items() if k != "user_id" and v is not None}
    user = user_service.update_user(
        ctx.users, actor, params["user_id"], changes, rounds=ctx.settings.bcrypt_rounds
    )
    logger.info("User updated", extra={"userId": user.id, "actorId": actor.id})
    return user


def me(ctx: HandlerContext, params: dict) -> User:
    return user_service.get_acting_user(ctx.users, ctx.identity.subject)


def register(router: Router, version: str = "v1"):
    router.get("/users", list_users, version=version, params=ListUsersParams,
               protected=True, presenter=USER_PAGE, name="List users")
    router.post("/users", create_user, version=version, params=CreateUserRequest,
                source="body", presenter=USER, status_code=201, name="Create user")
    router.get("/users/{user_id}", show_user, version=version, params=UserPathParams,
               protected=True, presenter=USER, name="Show user")
    router.patch("/users/{user_id}", update_user, version=version, params=UpdateUserRequest,
                 source="body", protected=True, presenter=USER, name="Update user")
    router.get("/me", me, version=version, protected=True, presenter=USER, name="Current user")
