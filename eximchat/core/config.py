# eximchat/core/config.py

from typing import List, Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # MongoDB settings
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DB: str = Field(default="chatdb")

    # Auth/JWT settings
    SECRET_KEY: str = Field(default="change-me")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 30)
    AUTH_REQUIRED: bool = Field(default=False)

    # Chat store behaviour
    STRICT_SCHEMA: bool = Field(default=True)
    CONVERSATION_GROUPING: Literal["aggregate", "python"] = Field(default="aggregate")

    # Gemini settings
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash")
    GEMINI_BASE_URL: str = Field(default="https://generativelanguage.googleapis.com/v1beta")

    # Client settings
    API_BASE_URL: str = Field(default="http://localhost:5000")
    HTTP_TIMEOUT: float = Field(default=30.0)

    CORS_ORIGINS: List[str] = Field(default=["*"])

settings = Settings()
