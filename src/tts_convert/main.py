"""
FastAPI Application Entry Point.

Creates the tts-convert application: loads ``.env``, configures logging,
registers the routes and builds the synthesis delegate on startup so that
a misconfigured provider fails the boot instead of the first request.

Usage:
    # Run with uvicorn
    uvicorn tts_convert.main:app --host 0.0.0.0 --port 3000

    # Or through the CLI (honours PORT / HOST)
    tts-convert --serve
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from tts_convert import __version__
from tts_convert.api.dependencies import get_app_config, get_delegate
from tts_convert.api.routes import router
from tts_convert.core.logging import configure_logging, get_logger, info

_LOG = get_logger("tts-convert.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the delegate once at startup (skipped with TTS_CONVERT_SKIP_WARMUP=1)."""
    if os.getenv("TTS_CONVERT_SKIP_WARMUP", "0") != "1":
        delegate = get_delegate()
        info(_LOG, "startup", provider=delegate.provider.name, model=delegate.model,
             voice=delegate.voice, storage_dir=str(delegate.store.base_dir),
             port=get_app_config().server.port)
    yield
    info(_LOG, "shutdown")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance ready to serve requests.
    """
    # .env first so OPENAI_API_KEY / PORT are visible to settings and logging
    load_dotenv()
    configure_logging()

    app = FastAPI(title="tts-convert", version=__version__, lifespan=lifespan)
    app.include_router(router)
    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()
