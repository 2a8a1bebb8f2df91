# eximchat/services/conversation_controller.py

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import uuid4
from bson import ObjectId
from eximchat.core.logger import get_logger
from eximchat.models.message import ConversationSummary, Message
from eximchat.services.chat_api_client import ChatApiClient
from eximchat.services.gemini import GeminiClient, make_turn
from eximchat.services.languages import DEFAULT_LANGUAGE, language_name
from eximchat.services.prompt_templates import (
    AI_ERROR_MESSAGE,
    SYSTEM_ACK,
    WELCOME_MESSAGE,
    build_system_prompt,
)
from eximchat.utils.errors import ExternalServiceError

logger = get_logger("controller")

HISTORY_WINDOW = 6


@dataclass
class ChatTurn:
    text: str
    sender: str
    id: Optional[str] = None  # None until the store has accepted it
    edited: bool = False

    @classmethod
    def from_message(cls, msg: Message) -> "ChatTurn":
        return cls(text=msg.text or "", sender=msg.sender or "user", id=msg.id, edited=msg.edited)

    @property
    def persisted(self) -> bool:
        return self.id is not None and ObjectId.is_valid(self.id)


def _api_role(turn: ChatTurn) -> str:
    return "user" if turn.sender == "user" else "model"


class ConversationController:
    """
    Keeps the local `messages` / `conversations` view in step with the API and
    drives the AI round-trip for each user turn.

    Mutations on one conversation run one at a time, in call order.
    """

    def __init__(self, api: ChatApiClient, ai: GeminiClient, language: str = DEFAULT_LANGUAGE):
        self.api = api
        self.ai = ai
        self.language = language
        self.conversation_id: Optional[str] = None
        self.messages: List[ChatTurn] = []
        self.conversations: List[ConversationSummary] = []
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ---------------------
    # Loading
    # ---------------------

    async def load_conversations(self) -> List[ConversationSummary]:
        self.conversations = await self.api.list_conversations()
        if not self.conversation_id and self.conversations:
            await self.select_conversation(self.conversations[0].conversation_id)
        return self.conversations

    async def select_conversation(self, conversation_id: str):
        self.conversation_id = conversation_id
        await self.load_messages(conversation_id)

    async def load_messages(self, conversation_id: str) -> List[ChatTurn]:
        stored = await self.api.list_messages(conversation_id)
        self.messages = [ChatTurn.from_message(m) for m in stored]
        return self.messages

    def new_conversation(self) -> str:
        """Start an empty conversation; nothing is stored until the first user turn."""
        self.conversation_id = uuid4().hex
        self.messages = [ChatTurn(text=WELCOME_MESSAGE, sender="ai")]
        return self.conversation_id

    async def delete_conversation(self, conversation_id: str):
        async with self._locks[conversation_id]:
            await self.api.delete_conversation(conversation_id)

        self.conversation_id = None
        self.messages = []
        await self.load_conversations()

    # ---------------------
    # Sending and editing
    # ---------------------

    def _system_turns(self) -> list:
        return [
            make_turn("user", build_system_prompt(language_name(self.language))),
            make_turn("model", SYSTEM_ACK),
        ]

    async def send_message(self, text: str) -> Optional[ChatTurn]:
        """Store a user turn and its AI reply. Returns the reply, or None for blank input."""
        if not text or not text.strip():
            return None

        if not self.conversation_id:
            self.conversation_id = uuid4().hex
        cid = self.conversation_id

        async with self._locks[cid]:
            history = [
                make_turn(_api_role(t), t.text)
                for t in self.messages[-HISTORY_WINDOW:]
            ]

            stored = await self.api.create_message(cid, "user", text)
            self.messages.append(ChatTurn.from_message(stored))
            await self.load_conversations()

            return await self._ask_ai(cid, text, self._system_turns() + history)

    async def edit_message(self, message_id: str, text: str) -> Optional[ChatTurn]:
        """
        Replace the text of a user turn, drop the AI answer that followed it,
        and ask the AI again with the corrected question.
        """
        if not text or not text.strip():
            return None

        cid = self.conversation_id
        if cid is None:
            raise KeyError(message_id)

        async with self._locks[cid]:
            # earlier sends or edits may have reshaped the list while we waited
            turn = next((t for t in self.messages if t.id == message_id), None)
            if turn is None:
                raise KeyError(message_id)
            if turn.sender != "user":
                raise ValueError("only user messages can be edited")

            turn.text = text
            turn.edited = True
            await self.api.update_message(cid, message_id, text)

            stale = self._following_ai_turn(message_id)
            if stale is not None:
                await self.api.delete_message(stale.id)
                self.messages = [t for t in self.messages if t is not stale]
            await self.load_conversations()

            index = self.messages.index(turn)
            history = [make_turn(_api_role(t), t.text) for t in self.messages[:index][-HISTORY_WINDOW:]]

            return await self._ask_ai(cid, text, self._system_turns() + history)

    def _following_ai_turn(self, message_id: str) -> Optional[ChatTurn]:
        pivot = ObjectId(message_id)
        candidates = [
            t for t in self.messages
            if t.sender == "ai" and t.persisted and ObjectId(t.id) > pivot
        ]
        return min(candidates, key=lambda t: ObjectId(t.id), default=None)

    async def _ask_ai(self, cid: str, prompt: str, history: list) -> ChatTurn:
        try:
            reply = await self.ai.generate(history, prompt)
        except ExternalServiceError as e:
            logger.error(f"AI call failed for conversation {cid}: {e}")
            placeholder = ChatTurn(text=AI_ERROR_MESSAGE, sender="ai")
            self.messages.append(placeholder)
            return placeholder

        stored = await self.api.create_message(cid, "ai", reply)
        turn = ChatTurn.from_message(stored)
        self.messages.append(turn)
        await self.load_conversations()
        return turn
