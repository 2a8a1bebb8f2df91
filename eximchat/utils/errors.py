# eximchat/utils/errors.py

from typing import Optional
from fastapi import HTTPException

class BadRequestError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)

class UnauthorizedRequestError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)

class InternalServerError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=detail)

class StoreError(InternalServerError):
    """Any database failure; the driver message is passed through."""


class ExternalServiceError(Exception):
    """Non-success answer (or no answer) from the generative-language API."""

    def __init__(self, status_code: Optional[int], detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"AI service error ({status_code}): {detail}" if detail else f"AI service error ({status_code})")
