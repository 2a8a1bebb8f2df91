# eximchat/routers/languages.py

from fastapi import APIRouter
from eximchat.services.languages import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

router = APIRouter(tags=["languages"])


@router.get("/languages", summary="Languages the assistant can answer in")
async def list_languages():
    return {"default": DEFAULT_LANGUAGE, "languages": SUPPORTED_LANGUAGES}
