# eximchat/db/mongo.py
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
from fastapi import Request
from eximchat.core.config import Settings
from eximchat.core.logger import logger

# Collections
CHATS = "chats"
USERS = "users"


def create_client(settings: Settings) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(settings.MONGODB_URI)


async def ensure_indexes(db: AsyncIOMotorDatabase):
    await db[CHATS].create_index([("conversationId", ASCENDING), ("timestamp", ASCENDING)])
    await db[CHATS].create_index([("user", ASCENDING), ("conversationId", ASCENDING)])
    await db[USERS].create_index("username", unique=True)


# Function to check DB connection
async def verify_mongodb_connection(client: AsyncIOMotorClient) -> bool:
    try:
        await client.server_info()
        logger.info("✅ MongoDB connection established")
        return True
    except PyMongoError as e:
        logger.error(f"❌ MongoDB connection failed: {str(e)}")
        return False


async def get_db(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.db
