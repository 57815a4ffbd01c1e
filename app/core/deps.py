"""FastAPI dependencies exposing the collaborators built at startup.

Handlers never read the environment; they get explicit objects from here,
and tests swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import anyio
from fastapi import Depends, Request

from app.core.config import Settings
from app.core.errors.exceptions import ConfigurationError, UnauthenticatedError
from app.core.identity.supabase_client import AuthenticatedUser, SupabaseGateway
from app.core.inference.replicate import ReplicateClient
from app.core.storage.r2 import R2Storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> R2Storage:
    r2 = getattr(request.app.state, "r2", None)
    if r2 is None:
        raise ConfigurationError("Cloudflare R2 is not enabled")
    return r2


def get_supabase(request: Request) -> SupabaseGateway:
    gateway = getattr(request.app.state, "supabase", None)
    if gateway is None:
        raise ConfigurationError("Supabase is not enabled")
    return gateway


def get_replicate(request: Request) -> ReplicateClient:
    client = getattr(request.app.state, "replicate", None)
    if client is None:
        raise ConfigurationError()
    return client


def _bearer_token(request: Request) -> str | None:
    header = (request.headers.get("authorization") or "").strip()
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    supabase: SupabaseGateway = Depends(get_supabase),
) -> AuthenticatedUser:
    token = _bearer_token(request)
    if token is None:
        raise UnauthenticatedError()
    return await anyio.to_thread.run_sync(supabase.get_user, token)
