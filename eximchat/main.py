# eximchat/main.py
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException
from eximchat.core.config import Settings, settings as default_settings
from eximchat.core.logger import logger
from eximchat.db.mongo import create_client, ensure_indexes, verify_mongodb_connection
from eximchat.routers import auth, chat, languages
from eximchat.utils.responses import format_error_response

SERVICE_NAME = "EXIM Trade Assistant"


def create_app(settings: Optional[Settings] = None, db: Optional[AsyncIOMotorDatabase] = None) -> FastAPI:
    """
    Build the API around an explicit store handle and config.
    Without `db` a Motor client is opened from MONGODB_URI and closed on shutdown.
    """
    settings = settings or default_settings
    client = None
    if db is None:
        client = create_client(settings)
        db = client[settings.MONGODB_DB]

    # ✅ Startup/shutdown
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if client is not None and await verify_mongodb_connection(client):
            await ensure_indexes(db)
        logger.info(f"🚀 {SERVICE_NAME} is live.")
        yield
        if client is not None:
            client.close()

    app = FastAPI(
        title=SERVICE_NAME,
        version="0.1.0",
        description="Conversation history API for the import/export chat assistant",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db

    # ✅ CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Health check
    @app.get("/", tags=["root"], summary="Health check")
    async def root():
        return {"status": "ok", "service": SERVICE_NAME}

    # ✅ Error handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=format_error_response(exc, status_code=exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=format_error_response(exc, status_code=400),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=format_error_response(exc),
        )

    # ✅ Routes
    app.include_router(auth.router,      prefix="/api/auth")
    app.include_router(chat.router,      prefix="/api")
    app.include_router(languages.router, prefix="/api")

    return app


app = create_app()
