from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI

from app.core.config import env_truthy
from app.core.errors.exceptions import AppError
from app.core.inference.replicate import ReplicateClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Collaborators injected before startup (tests) are left alone.
    if getattr(app.state, "replicate", None) is None:
        app.state.replicate = ReplicateClient.from_env()
        if not app.state.replicate.settings.configured:
            logger.warning("REPLICATE_API_TOKEN is not set; image generation will fail")

    # Optional Cloudflare R2 client.
    if getattr(app.state, "r2", None) is None and env_truthy("R2_ENABLED", "0"):
        from app.core.storage.r2 import R2Storage

        try:
            app.state.r2 = await anyio.to_thread.run_sync(R2Storage.from_env)
        except AppError:
            raise
        except Exception as exc:
            raise AppError(
                code="STARTUP_FAILED",
                message="Failed to initialize Cloudflare R2",
                http_status=500,
                cause=exc,
            ) from exc
        logger.info("Initialized Cloudflare R2 client")

    # Optional Supabase identity + upload metadata.
    if getattr(app.state, "supabase", None) is None and env_truthy("SUPABASE_ENABLED", "0"):
        from app.core.identity.supabase_client import SupabaseGateway

        try:
            app.state.supabase = await anyio.to_thread.run_sync(SupabaseGateway.from_env)
        except AppError:
            raise
        except Exception as exc:
            raise AppError(
                code="STARTUP_FAILED",
                message="Failed to initialize Supabase",
                http_status=500,
                cause=exc,
            ) from exc
        logger.info("Initialized Supabase client")

    yield
