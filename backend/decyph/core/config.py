from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv


_CONFIG_FILE = Path(__file__).resolve()
_PROJECT_ROOT = _CONFIG_FILE.parents[3]
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_PROJECT_ROOT / "backend" / ".env")

_DEFAULT_CORS_ORIGINS = (
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:9002",
	"http://127.0.0.1:9002",
)


def _split_origins(raw: str | None) -> Tuple[str, ...]:
	if not raw:
		return _DEFAULT_CORS_ORIGINS
	return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
	app_name: str = os.getenv("APP_NAME", "Decyph AI")
	api_prefix: str = os.getenv("API_PREFIX", "")
	openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
	openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
	openai_timeout_s: float = float(os.getenv("OPENAI_TIMEOUT_S", "60"))
	# The extraction contract is single-shot; operators may opt into SDK retries.
	openai_max_retries: int = int(os.getenv("OPENAI_MAX_RETRIES", "0"))
	pdf_max_pages: int = int(os.getenv("PDF_MAX_PAGES", "5"))
	max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
	log_level: str = os.getenv("LOG_LEVEL", "INFO")
	cors_origins: Tuple[str, ...] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS")))

	def validate_required_keys(self) -> None:
		"""Fail fast at startup if critical API keys are missing."""
		missing: list[str] = []
		if not self.openai_api_key:
			missing.append("OPENAI_API_KEY")
		if missing:
			raise RuntimeError(
				f"Missing required environment variable(s): {', '.join(missing)}. "
				f"Set them in your .env file or environment before starting the server."
			)


def configure_logging(level: str | None = None) -> None:
	logging.basicConfig(
		level=(level or settings.log_level).upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


settings = Settings()
