from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from decyph.core.errors import InvalidShape
from decyph.models.schemas import (
	BLOOD_ONLY_FIELDS,
	ExtractionResult,
	MedicalReportSummary,
	PrescriptionAnalysis,
	ProductLabelAnalysis,
	ReportKind,
	TaskKind,
)

ResultT = TypeVar("ResultT", bound=BaseModel)


def _describe_errors(exc: ValidationError) -> str:
	parts = []
	for error in exc.errors():
		location = ".".join(str(item) for item in error.get("loc", ())) or "output"
		parts.append(f"{location}: {error.get('msg', 'invalid value')}")
	return "; ".join(parts)


def _validate(model: Type[ResultT], raw: Any, label: str) -> ResultT:
	if not isinstance(raw, Mapping):
		raise InvalidShape(f"{label} output must be a JSON object, got {type(raw).__name__}")
	# The result tag is owned by the result model, never by the model output.
	payload: Dict[str, Any] = {key: value for key, value in raw.items() if key != "task"}
	try:
		return model.model_validate(payload)
	except ValidationError as exc:
		raise InvalidShape(f"{label} output is missing required information ({_describe_errors(exc)})") from exc


def normalize_product_label(raw: Any) -> ProductLabelAnalysis:
	return _validate(ProductLabelAnalysis, raw, "Product label analysis")


def normalize_prescription(raw: Any) -> PrescriptionAnalysis:
	return _validate(PrescriptionAnalysis, raw, "Prescription analysis")


def normalize_medical_report(raw: Any, report_kind: Optional[ReportKind] = None) -> MedicalReportSummary:
	"""Validate a report summary; blood-only lists are cleared for every other report kind."""
	result = _validate(MedicalReportSummary, raw, "Medical report summary")
	if report_kind is not ReportKind.BLOOD:
		result = result.model_copy(update={name: [] for name in BLOOD_ONLY_FIELDS})
	return result


def normalize(task: TaskKind, raw: Any, report_kind: Optional[ReportKind] = None) -> ExtractionResult:
	if task is TaskKind.PRODUCT_LABEL:
		return normalize_product_label(raw)
	if task is TaskKind.PRESCRIPTION:
		return normalize_prescription(raw)
	if task is TaskKind.MEDICAL_REPORT:
		return normalize_medical_report(raw, report_kind)
	raise ValueError(f"No normalizer for task {task!r}")
