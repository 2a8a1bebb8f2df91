# eximchat/routers/chat.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from eximchat.core.config import Settings
from eximchat.db.mongo import get_db
from eximchat.models.message import ChatCreate, ChatUpdate, ConversationSummary, Message
from eximchat.routers.deps import get_current_user, get_optional_user, get_settings, owner_id
from eximchat.services import chat_store
from eximchat.utils.responses import format_message

router = APIRouter(tags=["chat"])

# ---------------------
# Message Routes
# ---------------------

@router.post("/chats", response_model=Message, summary="Save a chat message")
async def create_chat(
    body: ChatCreate,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await chat_store.create_message(
        db,
        conversation_id=body.conversation_id,
        sender=body.sender,
        text=body.text,
        user=owner_id(current_user),
        strict=settings.STRICT_SCHEMA,
    )


@router.get("/chats", response_model=List[Message], summary="Get the messages of a conversation")
async def list_chats(
    conversation_id: Optional[str] = Query(default=None, alias="conversationId"),
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await chat_store.list_messages(db, conversation_id, user=owner_id(current_user))


@router.put("/chats", response_model=Message, summary="Edit the text of a message")
async def update_chat(
    body: ChatUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return await chat_store.update_message(
        db,
        conversation_id=body.conversation_id,
        message_id=body.message_id,
        text=body.text,
        user=owner_id(current_user),
    )


@router.delete("/chats/{message_id}", summary="Delete a single message")
async def delete_chat(
    message_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await chat_store.delete_message(db, message_id, user=owner_id(current_user))
    return format_message("Message deleted")


# ---------------------
# Conversation Routes
# ---------------------

@router.get("/conversations", response_model=List[ConversationSummary], summary="List conversations, most recent first")
async def list_conversations(
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await chat_store.list_conversations(
        db,
        user=owner_id(current_user),
        strategy=settings.CONVERSATION_GROUPING,
    )


@router.delete("/conversations/{conversation_id}", summary="Delete a whole conversation")
async def delete_conversation(
    conversation_id: str,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    await chat_store.delete_conversation(db, conversation_id, user=owner_id(current_user))
    return format_message("Conversation deleted")
