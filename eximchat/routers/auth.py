# eximchat/routers/auth.py

from datetime import datetime
from bson import ObjectId
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from eximchat.core.config import Settings
from eximchat.core.jwt import create_jwt_token
from eximchat.core.logger import get_logger
from eximchat.core.security import hash_password, verify_password
from eximchat.db.mongo import USERS, get_db
from eximchat.models.user import AuthResponse, PasswordChange, User, UserCredentials
from eximchat.routers.deps import get_current_user, get_settings
from eximchat.services.chat_store import store_errors
from eximchat.utils.errors import BadRequestError, UnauthorizedRequestError
from eximchat.utils.responses import format_message

router = APIRouter(tags=["auth"])
logger = get_logger("auth")


def _auth_response(user_id, username: str, settings: Settings) -> AuthResponse:
    token = create_jwt_token({"sub": str(user_id)}, settings)
    return AuthResponse(id=str(user_id), username=username, token=token)


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Create a new user")
async def register(
    user: UserCredentials,
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    username = user.username.strip()
    if not username:
        raise BadRequestError("username is required")

    # --- Duplicate username check ---
    with store_errors():
        existing = await db[USERS].find_one({"username": username})
    if existing:
        logger.warning(f"Registration refused, username taken: {username}")
        raise BadRequestError("User already exists")

    user_doc = {
        "username": username,
        "password": hash_password(user.password),
        "created_at": datetime.utcnow(),
    }
    with store_errors():
        try:
            result = await db[USERS].insert_one(user_doc)
        except DuplicateKeyError:
            # lost a race against a concurrent registration
            raise BadRequestError("User already exists")

    logger.info(f"Registered user: {username}")
    return _auth_response(result.inserted_id, username, settings)


@router.post("/login", response_model=AuthResponse, summary="Log in and receive a bearer token")
async def login(
    user: UserCredentials,
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    logger.info(f"Attempting login for: {user.username}")

    with store_errors():
        existing_user = await db[USERS].find_one({"username": user.username.strip()})

    if not existing_user or not verify_password(user.password, existing_user.get("password", "")):
        logger.warning(f"Login failed for: {user.username}")
        raise UnauthorizedRequestError("Invalid username or password")

    logger.info(f"Login successful for: {user.username}")
    return _auth_response(existing_user["_id"], existing_user["username"], settings)


@router.get("/me", response_model=User, summary="Get current user info")
async def whoami(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    with store_errors():
        user = await db[USERS].find_one({"_id": ObjectId(current_user["user_id"])}, {"password": 0})
    if not user:
        raise UnauthorizedRequestError("Not authorized, user not found")
    return User.from_mongo(user)


@router.put("/password", summary="Change the current user's password")
async def change_password(
    req: PasswordChange,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    query = {"_id": ObjectId(current_user["user_id"])}
    with store_errors():
        user = await db[USERS].find_one(query)
    if not user or not verify_password(req.current_password, user.get("password", "")):
        raise UnauthorizedRequestError("Current password is incorrect")

    with store_errors():
        await db[USERS].update_one(query, {"$set": {"password": hash_password(req.new_password)}})

    logger.info(f"Password changed for: {current_user['username']}")
    return format_message("Password updated")
