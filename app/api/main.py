"""
FastAPI Application

HTTP API server for résumé upload and AI extraction.
"""

import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api import resume as resume_api
from app.config import Config, get_config
from app.services.container import build_services
from app.utils.limiter import create_limiter
from app.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

# CORS: with allow_credentials=True, origins cannot be "*" (must be explicit).
_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _cors_origins(config: Config) -> list:
    origins = list(_DEFAULT_CORS_ORIGINS)
    if config.server.frontend_url:
        origins.append(config.server.frontend_url.rstrip("/"))
    # Extra origins from env (comma-separated), e.g. CORS_ORIGINS=http://192.168.1.5:3000
    for o in os.getenv("CORS_ORIGINS", "").split(","):
        o = o.strip().rstrip("/")
        if o and o not in origins:
            origins.append(o)
    return origins


def create_app(config: Optional[Config] = None, ai_client=None) -> FastAPI:
    """
    Build the FastAPI app.

    Services (including the AI client) are constructed here once and kept
    on ``app.state.services``; pass ``ai_client`` to substitute the model.
    """
    config = config or get_config()
    setup_logging(config)

    app = FastAPI(
        title="Resume Upload API",
        description="Résumé upload with AI-assisted structured extraction",
        version="1.0.0",
    )
    app.state.services = build_services(config, ai_client)

    limiter = create_limiter(config.server)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(config),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        """Liveness probe: returns 200 if the process is running."""
        return {"status": "ok"}

    app.include_router(resume_api.create_router(limiter, config.server.upload_rate_limit))

    if not config.gemini.api_key:
        logger.warning("[API] GEMINI_API_KEY not set - uploads will be accepted but AI processing is disabled")
    logger.info(f"[API] Resume upload API ready (model={config.gemini.model})")
    return app
