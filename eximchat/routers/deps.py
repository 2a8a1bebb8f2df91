# eximchat/routers/deps.py

from typing import Optional
from bson import ObjectId
from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase
from eximchat.core.config import Settings
from eximchat.core.jwt import decode_jwt_token
from eximchat.db.mongo import USERS, get_db
from eximchat.services.chat_store import store_errors
from eximchat.utils.errors import UnauthorizedRequestError

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def _resolve_user(token: str, settings: Settings, db: AsyncIOMotorDatabase) -> dict:
    user_id = decode_jwt_token(token, settings)
    if user_id is None or not ObjectId.is_valid(user_id):
        raise UnauthorizedRequestError("Not authorized, token failed")
    with store_errors():
        user = await db[USERS].find_one({"_id": ObjectId(user_id)}, {"password": 0})
    if not user:
        raise UnauthorizedRequestError("Not authorized, user not found")
    return {"user_id": str(user["_id"]), "username": user["username"]}


async def get_current_user(
    token: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> dict:
    if token is None:
        raise UnauthorizedRequestError("Not authorized, no token")
    return await _resolve_user(token.credentials, settings, db)


async def get_optional_user(
    token: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Optional[dict]:
    """Anonymous access is allowed unless AUTH_REQUIRED; a bad token is always rejected."""
    if token is None:
        if settings.AUTH_REQUIRED:
            raise UnauthorizedRequestError("Not authorized, no token")
        return None
    return await _resolve_user(token.credentials, settings, db)


def owner_id(current_user: Optional[dict]) -> Optional[str]:
    return current_user["user_id"] if current_user else None
