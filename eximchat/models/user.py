# eximchat/models/user.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class User(BaseModel):
    id: str
    username: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_mongo(cls, doc: dict) -> "User":
        return cls(id=str(doc["_id"]), username=doc["username"], created_at=doc.get("created_at"))

class UserCredentials(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., min_length=1, alias="newPassword")

class AuthResponse(BaseModel):
    id: str
    username: str
    token: str
