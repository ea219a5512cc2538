"""
FastAPI application entrypoint.

Registers routers, configures CORS, initializes telemetry,
and creates the chat service on startup.

Run locally with:
    uvicorn wa_guidance.main:app --app-dir api --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wa_guidance.core.config import get_settings
from wa_guidance.core.telemetry import setup_telemetry
from wa_guidance.routers import chat, health
from wa_guidance.services.chat import GuidanceChatService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """
    Application lifespan handler.
    Initializes the chat service on startup.
    """
    settings = get_settings()

    # Configure logging
    logging.basicConfig(level=settings.log_level)

    # Initialize telemetry
    setup_telemetry(settings)

    # Fails fast when OPENAI_API_KEY is missing
    application.state.chat_service = GuidanceChatService.from_settings(settings)

    logger.info("WA guidance service started (guidance_dir=%s).", settings.guidance_dir)
    yield
    logger.info("WA guidance service shutting down.")


app = FastAPI(
    title="WA Guidance Service API",
    description="Assistant for Washington ESSB 5814 interim guidance questions.",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router)
app.include_router(chat.router)
