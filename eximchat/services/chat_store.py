# eximchat/services/chat_store.py

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from eximchat.core.logger import get_logger
from eximchat.db.mongo import CHATS
from eximchat.models.message import Message, ConversationSummary
from eximchat.utils.errors import BadRequestError, NotFoundError, StoreError
from eximchat.utils.pagination import build_sort

logger = get_logger("chat_store")

SENDERS = ("user", "ai")


@contextmanager
def store_errors():
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Store failure: {e}", exc_info=True)
        raise StoreError(str(e))


def _object_id(value: str, field: str = "messageId") -> ObjectId:
    if not value or not ObjectId.is_valid(value):
        raise BadRequestError(f"{field} is not a valid id")
    return ObjectId(value)


def _now() -> datetime:
    # BSON dates keep millisecond precision
    now = datetime.utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _owner_filter(user: Optional[str]) -> dict:
    # anonymous callers only reach rows that have no owner
    if user is None:
        return {"user": None}
    return {"user": _object_id(user, "user")}


async def create_message(
    db: AsyncIOMotorDatabase,
    conversation_id: Optional[str],
    sender: Optional[str],
    text: Optional[str],
    user: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    strict: bool = True,
) -> Message:
    if strict:
        missing = [
            name for name, value in (("conversationId", conversation_id), ("sender", sender), ("text", text))
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise BadRequestError(f"Missing required field(s): {', '.join(missing)}")
        if sender not in SENDERS:
            raise BadRequestError(f"sender must be one of: {', '.join(SENDERS)}")

    doc = {
        "conversationId": conversation_id,
        "sender": sender,
        "text": text,
        "timestamp": timestamp or _now(),
        "edited": False,
    }
    doc.update(_owner_filter(user))

    with store_errors():
        result = await db[CHATS].insert_one(doc)
    doc["_id"] = result.inserted_id
    return Message.from_mongo(doc)


async def list_messages(
    db: AsyncIOMotorDatabase,
    conversation_id: Optional[str],
    user: Optional[str] = None,
) -> List[Message]:
    if not conversation_id:
        raise BadRequestError("conversationId required")

    query = {"conversationId": conversation_id, **_owner_filter(user)}
    with store_errors():
        cursor = db[CHATS].find(query).sort(build_sort("timestamp", "asc"))
        docs = await cursor.to_list(length=None)
    return [Message.from_mongo(doc) for doc in docs]


async def _group_with_pipeline(db: AsyncIOMotorDatabase, match: dict) -> List[dict]:
    pipeline = [
        {"$match": match},
        {"$sort": {"conversationId": 1, "timestamp": 1, "_id": 1}},
        {"$group": {
            "_id": "$conversationId",
            "lastMessage": {"$last": "$text"},
            "updatedAt": {"$last": "$timestamp"},
            "lastId": {"$last": "$_id"},
        }},
        {"$sort": {"updatedAt": -1, "lastId": -1}},
    ]
    groups = await db[CHATS].aggregate(pipeline).to_list(length=None)
    return [
        {"conversationId": g["_id"], "lastMessage": g.get("lastMessage"), "updatedAt": g.get("updatedAt")}
        for g in groups
    ]


async def _group_in_process(db: AsyncIOMotorDatabase, match: dict) -> List[dict]:
    # Newest first, so the first row seen per conversation is its latest message
    cursor = db[CHATS].find(match).sort(build_sort("timestamp", "desc"))
    seen = {}
    async for doc in cursor:
        cid = doc.get("conversationId")
        if cid not in seen:
            seen[cid] = {
                "conversationId": cid,
                "lastMessage": doc.get("text"),
                "updatedAt": doc.get("timestamp"),
            }
    return list(seen.values())


async def list_conversations(
    db: AsyncIOMotorDatabase,
    user: Optional[str] = None,
    strategy: str = "aggregate",
) -> List[ConversationSummary]:
    """
    One summary per distinct conversationId, newest first.
    Conversations with the same updatedAt come out most recently inserted
    first; callers should not depend on that order.
    """
    match = _owner_filter(user)
    with store_errors():
        if strategy == "python":
            groups = await _group_in_process(db, match)
        else:
            groups = await _group_with_pipeline(db, match)

    return [ConversationSummary(**g) for g in groups if g["conversationId"] is not None]


async def delete_conversation(
    db: AsyncIOMotorDatabase,
    conversation_id: str,
    user: Optional[str] = None,
) -> int:
    query = {"conversationId": conversation_id, **_owner_filter(user)}
    with store_errors():
        result = await db[CHATS].delete_many(query)
    logger.info(f"Deleted {result.deleted_count} message(s) from conversation {conversation_id}")
    return result.deleted_count


async def update_message(
    db: AsyncIOMotorDatabase,
    conversation_id: str,
    message_id: str,
    text: str,
    user: Optional[str] = None,
) -> Message:
    if not text or not text.strip():
        raise BadRequestError("text is required")

    query = {"_id": _object_id(message_id), "conversationId": conversation_id, **_owner_filter(user)}
    with store_errors():
        doc = await db[CHATS].find_one_and_update(
            query,
            {"$set": {"text": text, "edited": True}},
            return_document=ReturnDocument.AFTER,
        )
    if not doc:
        raise NotFoundError("Message not found")
    return Message.from_mongo(doc)


async def delete_message(
    db: AsyncIOMotorDatabase,
    message_id: str,
    user: Optional[str] = None,
) -> int:
    query = {"_id": _object_id(message_id), **_owner_filter(user)}
    with store_errors():
        result = await db[CHATS].delete_one(query)
    if result.deleted_count == 0:
        raise NotFoundError("Message not found")
    return result.deleted_count

