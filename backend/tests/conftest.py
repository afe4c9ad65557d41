from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest


def make_data_uri(mime_type: str, payload: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def make_pdf_bytes(*page_texts: str) -> bytes:
    doc = fitz.open()
    try:
        for text in page_texts:
            page = doc.new_page()
            page.insert_text((72, 72), text)
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def image_document() -> str:
    return make_data_uri("image/png", b"\x89PNG\r\n\x1a\nfake-label-pixels")


@pytest.fixture
def pdf_document() -> str:
    return make_data_uri("application/pdf", make_pdf_bytes("Hemoglobin 10.1 g/dL (13.0 - 17.0)"))


@pytest.fixture
def model_client() -> MagicMock:
    client = MagicMock()
    client.generate = AsyncMock(return_value=None)
    return client
