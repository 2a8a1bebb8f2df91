# eximchat/services/gemini.py

from typing import Dict, List, Optional
import httpx
from eximchat.core.config import Settings
from eximchat.core.logger import get_logger
from eximchat.services.prompt_templates import AI_FALLBACK_MESSAGE
from eximchat.utils.errors import ExternalServiceError

logger = get_logger("gemini")

Turn = Dict[str, object]


def make_turn(role: str, text: str) -> Turn:
    """A Gemini content entry; `role` is "user" or "model"."""
    return {"role": role, "parts": [{"text": text}]}


def extract_text(result: dict) -> str:
    try:
        return result["candidates"][0]["content"]["parts"][0]["text"] or AI_FALLBACK_MESSAGE
    except (KeyError, IndexError, TypeError):
        return AI_FALLBACK_MESSAGE


class GeminiClient:
    """Thin wrapper over the generateContent REST endpoint."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._http = http_client

    @property
    def url(self) -> str:
        base = self._settings.GEMINI_BASE_URL.rstrip("/")
        return f"{base}/models/{self._settings.GEMINI_MODEL}:generateContent"

    async def generate(self, history: List[Turn], prompt: str) -> str:
        payload = {"contents": [*history, make_turn("user", prompt)]}
        params = {"key": self._settings.GEMINI_API_KEY}

        try:
            if self._http is not None:
                resp = await self._http.post(self.url, params=params, json=payload, timeout=self._settings.HTTP_TIMEOUT)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(self.url, params=params, json=payload, timeout=self._settings.HTTP_TIMEOUT)
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise ExternalServiceError(None, str(e))

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.error(f"Gemini returned {resp.status_code}")
            raise ExternalServiceError(resp.status_code, resp.text[:200])

        try:
            result = resp.json()
        except ValueError:
            raise ExternalServiceError(resp.status_code, "response was not JSON")
        return extract_text(result)
