from __future__ import annotations

import base64
import binascii
import re
from typing import Optional, Union

from decyph.core.errors import RejectedInput
from decyph.models.schemas import MediaKind, MediaPayload, ReportKind, TaskKind

_MIME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9!#$&^_.+-]*/[a-z0-9][a-z0-9!#$&^_.+-]*$")
_PDF_MIME_TYPES = {"application/pdf", "application/x-pdf"}
# Raster formats the vision endpoint accepts.
_IMAGE_MIME_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/gif", "image/webp"}


def _media_kind(mime_type: str) -> Optional[MediaKind]:
	if mime_type in _IMAGE_MIME_TYPES:
		return MediaKind.IMAGE
	if mime_type in _PDF_MIME_TYPES:
		return MediaKind.PDF
	return None


def parse_data_uri(document: Optional[str]) -> MediaPayload:
	"""Parse a `data:<mime>;base64,<body>` string into a MediaPayload.

	Only image and PDF documents are recognised. The check is on the declared
	media kind: a well-formed data URI declaring e.g. `text/plain` is rejected.
	"""
	if document is None or not isinstance(document, str) or not document.strip():
		raise RejectedInput("Invalid or missing document: expected a data URI")

	trimmed = document.strip()
	if not trimmed.lower().startswith("data:") or "," not in trimmed:
		raise RejectedInput("Invalid document: expected a data URI of the form 'data:<mime>;base64,<data>'")

	header, body = trimmed.split(",", 1)
	parts = [part.strip() for part in header[len("data:"):].split(";")]
	mime_type = parts[0].lower()
	params = {part.lower() for part in parts[1:]}

	if not _MIME_PATTERN.match(mime_type):
		raise RejectedInput("Invalid document: data URI does not declare a media type")
	if "base64" not in params:
		raise RejectedInput("Invalid document: data URI must use Base64 encoding")

	kind = _media_kind(mime_type)
	if kind is None:
		raise RejectedInput(f"Unsupported document type '{mime_type}': only PNG, JPEG, GIF, WebP or PDF files are supported")

	# URL-encoded bodies can carry '+' as spaces.
	encoded = re.sub(r"[\r\n\t]", "", body.strip()).replace(" ", "+")
	if not encoded:
		raise RejectedInput("Invalid document: data URI contains empty base64 data")
	try:
		base64.b64decode(encoded, validate=True)
	except (binascii.Error, ValueError) as exc:
		raise RejectedInput("Invalid document: data URI body is not valid base64") from exc

	return MediaPayload(mime_type=mime_type, kind=kind, data=encoded)


def coerce_task(task: Union[TaskKind, str, None]) -> TaskKind:
	if isinstance(task, TaskKind):
		return task
	try:
		return TaskKind(str(task).strip().lower())
	except ValueError as exc:
		allowed = ", ".join(kind.value for kind in TaskKind)
		raise RejectedInput(f"Unknown analysis task '{task}': expected one of {allowed}") from exc


def coerce_report_kind(report_kind: Union[ReportKind, str, None]) -> Optional[ReportKind]:
	if report_kind is None or isinstance(report_kind, ReportKind):
		return report_kind
	if not str(report_kind).strip():
		return None
	try:
		return ReportKind(str(report_kind).strip().lower())
	except ValueError as exc:
		allowed = ", ".join(kind.value for kind in ReportKind)
		raise RejectedInput(f"Unknown medical report type '{report_kind}': expected one of {allowed}") from exc


def validate_request(
	document: Optional[str],
	task: Union[TaskKind, str, None],
	report_kind: Union[ReportKind, str, None] = None,
) -> MediaPayload:
	"""Pre-flight check run before any model call; raises RejectedInput."""
	task_kind = coerce_task(task)
	media = parse_data_uri(document)

	if task_kind is TaskKind.MEDICAL_REPORT and coerce_report_kind(report_kind) is None:
		raise RejectedInput("Medical report type is required")

	return media
