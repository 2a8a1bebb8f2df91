# eximchat/models/message.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional
from datetime import datetime

Sender = Literal["user", "ai"]


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    user: Optional[str] = None
    sender: Optional[str] = None
    text: Optional[str] = None
    timestamp: Optional[datetime] = None
    edited: bool = False

    @classmethod
    def from_mongo(cls, doc: dict) -> "Message":
        return cls(
            id=str(doc["_id"]),
            conversation_id=doc.get("conversationId"),
            user=str(doc["user"]) if doc.get("user") is not None else None,
            sender=doc.get("sender"),
            text=doc.get("text"),
            timestamp=doc.get("timestamp"),
            edited=doc.get("edited", False),
        )


class ConversationSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(alias="conversationId")
    last_message: Optional[str] = Field(default=None, alias="lastMessage")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


# ---------------------
# Request bodies
# ---------------------

class ChatCreate(BaseModel):
    """Body of POST /api/chats; required fields are enforced by the store when STRICT_SCHEMA is on."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    sender: Optional[str] = None
    text: Optional[str] = None


class ChatUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(..., alias="conversationId")
    message_id: str = Field(..., alias="messageId")
    text: str
