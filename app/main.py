from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

# Load project-root .env if present.
# Note: Uvicorn does not automatically load it unless started with --env-file.
_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.exists():
    # Prefer .env values over inherited shell env vars for local runs.
    load_dotenv(dotenv_path=_env_path, override=True)

from app.core.config import Settings
from app.core.errors.handlers import register_exception_handlers
from app.core.log import configure_logging
from app.domains.image_generation.router import router as image_generation_router
from app.domains.image_upload.router import router as image_upload_router
from app.lifespan import lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="AI Image Editor API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.replicate = None
    app.state.r2 = None
    app.state.supabase = None

    register_exception_handlers(app)

    app.include_router(image_upload_router, prefix="/v1")
    app.include_router(image_generation_router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    async def readyz():
        replicate = getattr(app.state, "replicate", None)
        generation_ready = bool(replicate and replicate.settings.configured)
        storage_ready = getattr(app.state, "r2", None) is not None
        auth_ready = getattr(app.state, "supabase", None) is not None
        return {
            "server_ready": generation_ready,
            "generation_ready": generation_ready,
            "upload_ready": storage_ready and auth_ready,
            "storage_ready": storage_ready,
            "auth_ready": auth_ready,
        }

    return app


app = create_app()
