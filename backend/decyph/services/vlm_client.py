from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Protocol, Type

import fitz  # PyMuPDF
from openai import AsyncOpenAI
from pydantic import BaseModel

from decyph.core.config import Settings, settings
from decyph.core.errors import ModelFailure, RejectedInput
from decyph.models.schemas import MediaKind, MediaPayload

logger = logging.getLogger(__name__)


class StructuredModelClient(Protocol):
	"""Renders a prompt plus attached media to a multimodal model and returns a schema-shaped object.

	Returns None when the model produced no structured output.
	"""

	async def generate(
		self,
		prompt: str,
		media: MediaPayload,
		schema: Type[BaseModel],
		system_prompt: Optional[str] = None,
	) -> Optional[Dict[str, Any]]:
		...


def pdf_to_png_data_urls(pdf_bytes: bytes, max_pages: int) -> List[str]:
	"""Render the first `max_pages` pages of a PDF into PNG data URLs."""
	try:
		doc = fitz.open(stream=pdf_bytes, filetype="pdf")
	except Exception as exc:
		raise RejectedInput(f"PDF document could not be opened: {exc}") from exc

	png_pages: List[str] = []
	try:
		for index, page in enumerate(doc):
			if index >= max_pages:
				break
			# Render at 2x zoom for better legibility
			pix = page.get_pixmap(matrix=fitz.Matrix(2, 2))
			png_bytes = pix.tobytes("png")
			png_pages.append("data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii"))
	finally:
		doc.close()

	if not png_pages:
		raise RejectedInput("PDF contained no renderable pages")
	return png_pages


class OpenAIVisionClient:
	"""StructuredModelClient backed by OpenAI structured outputs."""

	def __init__(self, config: Settings = settings, client: Optional[AsyncOpenAI] = None) -> None:
		self._settings = config
		self._client = client

	def _get_client(self) -> AsyncOpenAI:
		if self._client is None:
			if not self._settings.openai_api_key:
				raise ModelFailure("OPENAI_API_KEY is not configured for document analysis")
			self._client = AsyncOpenAI(
				api_key=self._settings.openai_api_key,
				timeout=self._settings.openai_timeout_s,
				max_retries=self._settings.openai_max_retries,
			)
		return self._client

	def build_image_urls(self, media: MediaPayload) -> List[str]:
		if media.kind is MediaKind.PDF:
			pages = pdf_to_png_data_urls(media.decode(), self._settings.pdf_max_pages)
			logger.info("Rendered %d PDF page(s) to PNG for vision analysis", len(pages))
			return pages
		return [media.data_uri]

	async def generate(
		self,
		prompt: str,
		media: MediaPayload,
		schema: Type[BaseModel],
		system_prompt: Optional[str] = None,
	) -> Optional[Dict[str, Any]]:
		image_urls = self.build_image_urls(media)
		client = self._get_client()

		content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
		content.extend({"type": "image_url", "image_url": {"url": url}} for url in image_urls)
		messages: List[Dict[str, Any]] = []
		if system_prompt:
			messages.append({"role": "system", "content": system_prompt})
		messages.append({"role": "user", "content": content})

		response = await client.chat.completions.parse(
			model=self._settings.openai_model,
			messages=messages,
			response_format=schema,
		)
		if not response.choices:
			return None

		message = response.choices[0].message
		if getattr(message, "refusal", None):
			logger.warning("Model refused the request: %s", message.refusal)
			return None

		parsed: Optional[BaseModel] = message.parsed
		if parsed is None:
			return None
		return parsed.model_dump(exclude_none=True)
