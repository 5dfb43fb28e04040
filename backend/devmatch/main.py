"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from devmatch.api.errors import install_error_handlers
from devmatch.moderation import router as moderation_router
from devmatch.moderation import shutdown as shutdown_moderation
from devmatch.obs import init as obs_init
from devmatch.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	try:
		yield
	finally:
		await shutdown_moderation()


app = FastAPI(title="DevMatch moderation console", lifespan=lifespan)
obs_init(app)
install_error_handlers(app)
app.include_router(moderation_router)


@app.get("/health")
async def health() -> dict[str, str]:
	return {"status": "ok", "service": settings.service_name, "commit": settings.git_commit}
