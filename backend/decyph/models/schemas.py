from __future__ import annotations

import base64
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class TaskKind(str, Enum):
	PRODUCT_LABEL = "product-label"
	PRESCRIPTION = "prescription"
	MEDICAL_REPORT = "medical-report"


class ReportKind(str, Enum):
	BLOOD = "blood"
	ECG = "ecg"
	XRAY = "xray"
	MRI = "mri"
	OTHER = "other"


class MediaKind(str, Enum):
	IMAGE = "image"
	PDF = "pdf"


class MediaPayload(BaseModel):
	"""A validated `data:<mime>;base64,<body>` document."""

	model_config = ConfigDict(frozen=True)

	mime_type: str
	kind: MediaKind
	data: str

	@property
	def data_uri(self) -> str:
		return f"data:{self.mime_type};base64,{self.data}"

	def decode(self) -> bytes:
		return base64.b64decode(self.data)


# ---------------------------------------------------------------------------
# Wire schemas: sent to the model as the required response format.
# ---------------------------------------------------------------------------


class IngredientOutput(BaseModel):
	name: str = Field(description="The name of the ingredient identified on the label.")
	description: Optional[str] = Field(default=None, description="A brief description of the ingredient.")
	common_uses: Optional[str] = Field(default=None, description="Common uses or functions of the ingredient in products.")
	pros_cons: Optional[str] = Field(default=None, description="Potential benefits and drawbacks or considerations.")
	side_effects_allergens: Optional[str] = Field(default=None, description="Known potential side effects or allergen information.")
	warnings_regulatory: Optional[str] = Field(default=None, description="Any specific warnings, safety notes, or regulatory status.")


class ProductLabelOutput(BaseModel):
	ingredients: List[IngredientOutput] = Field(
		description="Ingredients identified on the product label, with details for each."
	)


class MedicineOutput(BaseModel):
	name: str = Field(description='Full name of the medicine including dosage if available, e.g. "Lisinopril 10mg".')
	description: str = Field(description="What the medicine is typically used for (its purpose or drug class).")
	side_effects: str = Field(description="Common and potentially serious side effects.")
	precautions: str = Field(description="Important precautions, warnings, or contraindications.")


class PrescriptionOutput(BaseModel):
	medicines: List[MedicineOutput] = Field(
		description="Each distinct medicine identified in the prescription; empty if none can be identified."
	)


class MedicalReportOutput(BaseModel):
	summary: str = Field(description="A clear, concise, human-readable summary of the report.")
	key_findings: Optional[List[str]] = Field(default=None, description="The most important specific findings or measurements.")
	abnormal_results: Optional[List[str]] = Field(
		default=None, description="Results flagged as abnormal or outside normal ranges, with reference ranges if present."
	)
	recommendations: Optional[List[str]] = Field(
		default=None, description="Recommendations or next steps stated in the report itself."
	)
	possible_causes: Optional[List[str]] = Field(
		default=None, description="[Blood reports only] General potential causes (informational only)."
	)
	dietary_recommendations: Optional[List[str]] = Field(
		default=None, description="[Blood reports only] General dietary suggestions (not medical advice)."
	)
	common_medications: Optional[List[str]] = Field(
		default=None, description="[Blood reports only] Example medication classes (not prescription advice)."
	)
	disclaimer: str = Field(description="Mandatory AI-generated, informational-only disclaimer.")


# ---------------------------------------------------------------------------
# Result models: what callers receive after normalization.
# ---------------------------------------------------------------------------


def _blank_to_none(value: Any) -> Any:
	if isinstance(value, str) and not value.strip():
		return None
	return value


def _clean_list(value: Any) -> Any:
	if value is None:
		return []
	if isinstance(value, (list, tuple)):
		cleaned = []
		for item in value:
			if item is None:
				continue
			if isinstance(item, str):
				item = item.strip()
				if not item:
					continue
			cleaned.append(item)
		return cleaned
	return value


class IngredientInfo(BaseModel):
	model_config = ConfigDict(str_strip_whitespace=True)

	name: str = Field(min_length=1)
	description: Optional[str] = None
	common_uses: Optional[str] = Field(default=None, validation_alias=AliasChoices("common_uses", "commonUses"))
	pros_cons: Optional[str] = Field(default=None, validation_alias=AliasChoices("pros_cons", "prosCons"))
	side_effects_allergens: Optional[str] = Field(
		default=None, validation_alias=AliasChoices("side_effects_allergens", "sideEffectsAllergens")
	)
	warnings_regulatory: Optional[str] = Field(
		default=None, validation_alias=AliasChoices("warnings_regulatory", "warningsRegulatory")
	)

	@field_validator(
		"description", "common_uses", "pros_cons", "side_effects_allergens", "warnings_regulatory", mode="before"
	)
	@classmethod
	def absent_when_blank(cls, value: Any) -> Any:
		"""A blank detail means "no data", which is represented as absent."""
		return _blank_to_none(value)


class ProductLabelAnalysis(BaseModel):
	task: Literal[TaskKind.PRODUCT_LABEL] = TaskKind.PRODUCT_LABEL
	ingredients: List[IngredientInfo] = Field(default_factory=list)

	@field_validator("ingredients", mode="before")
	@classmethod
	def default_ingredients(cls, value: Any) -> Any:
		return _clean_list(value)


class MedicineInfo(BaseModel):
	model_config = ConfigDict(str_strip_whitespace=True)

	name: str = Field(min_length=1)
	description: str = Field(min_length=1)
	side_effects: str = Field(min_length=1, validation_alias=AliasChoices("side_effects", "sideEffects"))
	precautions: str = Field(min_length=1)


class PrescriptionAnalysis(BaseModel):
	task: Literal[TaskKind.PRESCRIPTION] = TaskKind.PRESCRIPTION
	medicines: List[MedicineInfo] = Field(default_factory=list)

	@field_validator("medicines", mode="before")
	@classmethod
	def default_medicines(cls, value: Any) -> Any:
		return _clean_list(value)


BLOOD_ONLY_FIELDS = ("possible_causes", "dietary_recommendations", "common_medications")


class MedicalReportSummary(BaseModel):
	model_config = ConfigDict(str_strip_whitespace=True)

	task: Literal[TaskKind.MEDICAL_REPORT] = TaskKind.MEDICAL_REPORT
	summary: str = Field(min_length=1)
	key_findings: List[str] = Field(default_factory=list, validation_alias=AliasChoices("key_findings", "keyFindings"))
	abnormal_results: List[str] = Field(
		default_factory=list, validation_alias=AliasChoices("abnormal_results", "abnormalResults")
	)
	recommendations: List[str] = Field(default_factory=list)
	possible_causes: List[str] = Field(
		default_factory=list, validation_alias=AliasChoices("possible_causes", "possibleCauses")
	)
	dietary_recommendations: List[str] = Field(
		default_factory=list, validation_alias=AliasChoices("dietary_recommendations", "dietaryRecommendations")
	)
	common_medications: List[str] = Field(
		default_factory=list, validation_alias=AliasChoices("common_medications", "commonMedications")
	)
	disclaimer: str = Field(min_length=1)

	@field_validator(
		"key_findings",
		"abnormal_results",
		"recommendations",
		"possible_causes",
		"dietary_recommendations",
		"common_medications",
		mode="before",
	)
	@classmethod
	def default_lists(cls, value: Any) -> Any:
		return _clean_list(value)


ExtractionResult = Annotated[
	Union[ProductLabelAnalysis, PrescriptionAnalysis, MedicalReportSummary],
	Field(discriminator="task"),
]


# ---------------------------------------------------------------------------
# API request/response envelopes.
# ---------------------------------------------------------------------------

_DOCUMENT_DESCRIPTION = (
	"The document as a data URI with a MIME type and Base64 body, "
	"e.g. 'data:image/png;base64,<encoded_data>' or 'data:application/pdf;base64,<encoded_data>'."
)


class DocumentRequest(BaseModel):
	document: Optional[str] = Field(
		default=None,
		validation_alias=AliasChoices("document", "data_uri", "dataUri"),
		description=_DOCUMENT_DESCRIPTION,
	)


class MedicalReportRequest(DocumentRequest):
	report_type: Optional[ReportKind] = Field(
		default=None,
		validation_alias=AliasChoices("report_type", "reportType"),
		description="The type of medical report (select 'other' if unsure).",
	)


class ExtractionRequest(MedicalReportRequest):
	task: TaskKind


class AnalysisResponse(BaseModel):
	task: TaskKind
	report_type: Optional[ReportKind] = None
	result: ExtractionResult
	pipeline_logs: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
	status: str = "ok"
	model: str
