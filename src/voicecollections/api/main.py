import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import router as auth_router
from .collections import router as collections_router
from .documents import router as documents_router
from .middleware import LoggingMiddleware
from .profile import router as profile_router
from .settings import get_settings
from .speech import router as speech_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Voice Collections API",
    description="Extract text from documents, synthesize it with Botnoi Voice and keep it as collections",
    version="0.1.0",
)
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(documents_router)
app.include_router(speech_router)
app.include_router(collections_router)


@app.get("/api/health", tags=["Utility"])
@app.get("/up", tags=["Utility"], include_in_schema=False)
async def health() -> dict[str, str]:
    """Liveness check; does not touch the database or Botnoi."""
    return {"status": "ok", "service": "voicecollections"}


@app.get("/api/v1/environment", tags=["Utility"])
async def get_environment() -> dict[str, str | dict[str, bool]]:
    """Environment name plus the flags the frontend switches on."""
    return {
        "environment": settings.env,
        "features": {
            "signup_enabled": settings.env in ["dev", "docker"],
            "debug_mode": settings.env == "dev",
        },
    }
