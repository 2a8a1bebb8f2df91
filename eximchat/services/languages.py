# eximchat/services/languages.py

from typing import Dict, List

DEFAULT_LANGUAGE = "en-US"
DEFAULT_LANGUAGE_NAME = "English"

# BCP-47 code -> display name, in selector order
SUPPORTED_LANGUAGES: List[Dict[str, str]] = [
    {"code": "en-US", "name": "English (US)"},
    {"code": "en-IN", "name": "English (India)"},
    {"code": "hi-IN", "name": "हिन्दी (Hindi)"},
    {"code": "gu-IN", "name": "ગુજરાતી (Gujarati)"},
    {"code": "ta-IN", "name": "தமிழ் (Tamil)"},
    {"code": "ur-IN", "name": "اردو (Urdu)"},
    {"code": "bn-IN", "name": "বাংলা (Bengali)"},
    {"code": "te-IN", "name": "తెలుగు (Telugu)"},
    {"code": "mr-IN", "name": "मराठी (Marathi)"},
    {"code": "es-ES", "name": "Español (España)"},
    {"code": "fr-FR", "name": "Français"},
    {"code": "zh-CN", "name": "中文 (Mandarin)"},
    {"code": "ar-SA", "name": "العربية (Arabic)"},
    {"code": "ml-IN", "name": "മലയാളം (Malayalam)"},
    {"code": "ne-NE", "name": "नेपाली (Nepali)"},
]


def language_name(code: str) -> str:
    """Display name for a language code, English when the code is unknown."""
    for lang in SUPPORTED_LANGUAGES:
        if lang["code"] == code:
            return lang["name"]
    return DEFAULT_LANGUAGE_NAME


def is_supported(code: str) -> bool:
    return any(lang["code"] == code for lang in SUPPORTED_LANGUAGES)
