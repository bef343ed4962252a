from fastapi import Request

from api.config import Settings
from port.user_repository import UserRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repo(request: Request) -> UserRepository:
    return request.app.state.users
