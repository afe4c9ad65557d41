from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from decyph.api.routes import router
from decyph.core.config import configure_logging, settings


@asynccontextmanager
async def lifespan(_: FastAPI):
	_validate_required_settings()
	yield


def _validate_required_settings() -> None:
	"""Fail fast at startup if critical API keys are missing."""
	settings.validate_required_keys()


configure_logging()

app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
	CORSMiddleware,
	allow_origins=list(settings.cors_origins),
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(router, prefix=settings.api_prefix)
