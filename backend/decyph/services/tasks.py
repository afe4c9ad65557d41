from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel

from decyph.models.schemas import (
	ExtractionResult,
	MedicalReportOutput,
	MedicalReportSummary,
	PrescriptionAnalysis,
	PrescriptionOutput,
	ProductLabelAnalysis,
	ProductLabelOutput,
	ReportKind,
	TaskKind,
)
from decyph.services.normalization_service import (
	normalize_medical_report,
	normalize_prescription,
	normalize_product_label,
)
from decyph.services.prompt_service import render_prompt, system_prompt


class ExtractionTask(ABC):
	"""One analysis flow: the prompt it renders, the schema it requests and how it normalizes."""

	kind: TaskKind
	output_schema: Type[BaseModel]
	report_kind: Optional[ReportKind] = None

	def render_prompt(self) -> str:
		return render_prompt(self.kind, self.report_kind)

	def system_prompt(self) -> str:
		return system_prompt(self.kind)

	def empty_output(self) -> Optional[Dict[str, Any]]:
		"""Raw output to normalize when the model returns nothing; None means the call failed."""
		return None

	@abstractmethod
	def normalize(self, raw: Any) -> ExtractionResult:
		...

	@abstractmethod
	def describe(self, result: ExtractionResult) -> str:
		"""Short human-readable count used in pipeline logs."""

	def __repr__(self) -> str:
		suffix = f", report_kind={self.report_kind.value}" if self.report_kind else ""
		return f"{type(self).__name__}(kind={self.kind.value}{suffix})"


def _plural(count: int, singular: str, plural: str) -> str:
	return f"{count} {singular if count == 1 else plural}"


class ProductLabelTask(ExtractionTask):
	kind = TaskKind.PRODUCT_LABEL
	output_schema = ProductLabelOutput

	def normalize(self, raw: Any) -> ProductLabelAnalysis:
		return normalize_product_label(raw)

	def describe(self, result: ProductLabelAnalysis) -> str:
		return _plural(len(result.ingredients), "ingredient", "ingredients") + " identified"


class PrescriptionTask(ExtractionTask):
	kind = TaskKind.PRESCRIPTION
	output_schema = PrescriptionOutput

	# No output means no medicines were found.
	def empty_output(self) -> Optional[Dict[str, Any]]:
		return {}

	def normalize(self, raw: Any) -> PrescriptionAnalysis:
		return normalize_prescription(raw)

	def describe(self, result: PrescriptionAnalysis) -> str:
		return _plural(len(result.medicines), "medicine", "medicines") + " identified"


class MedicalReportTask(ExtractionTask):
	kind = TaskKind.MEDICAL_REPORT
	output_schema = MedicalReportOutput

	def __init__(self, report_kind: ReportKind) -> None:
		self.report_kind = report_kind

	def empty_output(self) -> Optional[Dict[str, Any]]:
		return {}

	def normalize(self, raw: Any) -> MedicalReportSummary:
		return normalize_medical_report(raw, self.report_kind)

	def describe(self, result: MedicalReportSummary) -> str:
		return (
			f"summary produced with {_plural(len(result.key_findings), 'key finding', 'key findings')} "
			f"and {_plural(len(result.abnormal_results), 'abnormal result', 'abnormal results')}"
		)


def get_task(kind: TaskKind, report_kind: Optional[ReportKind] = None) -> ExtractionTask:
	if kind is TaskKind.PRODUCT_LABEL:
		return ProductLabelTask()
	if kind is TaskKind.PRESCRIPTION:
		return PrescriptionTask()
	if kind is TaskKind.MEDICAL_REPORT:
		if report_kind is None:
			raise ValueError("A report kind is required for medical report analysis")
		return MedicalReportTask(report_kind)
	raise ValueError(f"Unknown analysis task {kind!r}")
