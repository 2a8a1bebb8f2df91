# eximchat/services/chat_api_client.py

from typing import List, Optional
from urllib.parse import quote
import httpx
from eximchat.models.message import ConversationSummary, Message
from eximchat.models.user import AuthResponse


class AuthenticationRequired(Exception):
    """The API answered 401; the caller has to log in again."""


class ChatApiClient:
    """Async client for the /api routes, holding the bearer token once logged in."""

    def __init__(self, http_client: httpx.AsyncClient, token: Optional[str] = None):
        self._http = http_client
        self.token = token

    def _headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        resp = await self._http.request(method, path, headers=self._headers(), **kwargs)
        if resp.status_code == 401:
            raise AuthenticationRequired(resp.text)
        resp.raise_for_status()
        return resp

    # --- auth ---

    async def register(self, username: str, password: str) -> AuthResponse:
        resp = await self._request("POST", "/api/auth/register", json={"username": username, "password": password})
        auth = AuthResponse(**resp.json())
        self.token = auth.token
        return auth

    async def login(self, username: str, password: str) -> AuthResponse:
        resp = await self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        auth = AuthResponse(**resp.json())
        self.token = auth.token
        return auth

    def logout(self):
        self.token = None

    # --- conversations ---

    async def list_conversations(self) -> List[ConversationSummary]:
        resp = await self._request("GET", "/api/conversations")
        return [ConversationSummary(**c) for c in resp.json()]

    async def delete_conversation(self, conversation_id: str):
        await self._request("DELETE", f"/api/conversations/{quote(conversation_id, safe='')}")

    # --- messages ---

    async def list_messages(self, conversation_id: str) -> List[Message]:
        resp = await self._request("GET", "/api/chats", params={"conversationId": conversation_id})
        return [Message(**m) for m in resp.json()]

    async def create_message(self, conversation_id: str, sender: str, text: str) -> Message:
        resp = await self._request(
            "POST",
            "/api/chats",
            json={"conversationId": conversation_id, "sender": sender, "text": text},
        )
        return Message(**resp.json())

    async def update_message(self, conversation_id: str, message_id: str, text: str) -> Message:
        resp = await self._request(
            "PUT",
            "/api/chats",
            json={"conversationId": conversation_id, "messageId": message_id, "text": text},
        )
        return Message(**resp.json())

    async def delete_message(self, message_id: str):
        await self._request("DELETE", f"/api/chats/{message_id}")
