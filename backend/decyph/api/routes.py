from __future__ import annotations

import base64
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from decyph.core.config import settings
from decyph.core.errors import EmptyResponse, InvalidShape, ModelFailure, RejectedInput
from decyph.models.schemas import (
	AnalysisResponse,
	DocumentRequest,
	ExtractionRequest,
	HealthResponse,
	MedicalReportRequest,
	ReportKind,
	TaskKind,
)
from decyph.services.extraction_service import run_extraction
from decyph.services.validation_service import coerce_report_kind
from decyph.services.vlm_client import OpenAIVisionClient, StructuredModelClient

logger = logging.getLogger(__name__)

router = APIRouter()


def get_model_client() -> StructuredModelClient:
	return OpenAIVisionClient(settings)


async def _analyze(
	document: Optional[str],
	task: TaskKind,
	client: StructuredModelClient,
	report_type: Union[ReportKind, str, None] = None,
	pipeline_logs: Optional[List[str]] = None,
) -> AnalysisResponse:
	pipeline_logs = pipeline_logs if pipeline_logs is not None else []
	try:
		result = await run_extraction(document, task, client, pipeline_logs, report_type)
	except RejectedInput as exc:
		raise HTTPException(status_code=422, detail=str(exc)) from exc
	except (ModelFailure, EmptyResponse, InvalidShape) as exc:
		raise HTTPException(status_code=502, detail=str(exc)) from exc
	except Exception as exc:
		logger.exception("Unexpected failure during %s analysis", task.value)
		raise HTTPException(status_code=500, detail=f"Internal server error: {exc}") from exc

	return AnalysisResponse(
		task=task,
		report_type=coerce_report_kind(report_type) if task is TaskKind.MEDICAL_REPORT else None,
		result=result,
		pipeline_logs=list(pipeline_logs),
	)


@router.get("/health", response_model=HealthResponse)
async def health_route() -> HealthResponse:
	return HealthResponse(model=settings.openai_model)


@router.post("/analyze/product-label", response_model=AnalysisResponse)
async def analyze_product_label_route(
	payload: DocumentRequest,
	client: StructuredModelClient = Depends(get_model_client),
) -> AnalysisResponse:
	return await _analyze(payload.document, TaskKind.PRODUCT_LABEL, client)


@router.post("/analyze/prescription", response_model=AnalysisResponse)
async def analyze_prescription_route(
	payload: DocumentRequest,
	client: StructuredModelClient = Depends(get_model_client),
) -> AnalysisResponse:
	return await _analyze(payload.document, TaskKind.PRESCRIPTION, client)


@router.post("/analyze/medical-report", response_model=AnalysisResponse)
async def analyze_medical_report_route(
	payload: MedicalReportRequest,
	client: StructuredModelClient = Depends(get_model_client),
) -> AnalysisResponse:
	return await _analyze(payload.document, TaskKind.MEDICAL_REPORT, client, payload.report_type)


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_route(
	payload: ExtractionRequest,
	client: StructuredModelClient = Depends(get_model_client),
) -> AnalysisResponse:
	return await _analyze(payload.document, payload.task, client, payload.report_type)


@router.post("/analyze/upload", response_model=AnalysisResponse)
async def analyze_upload_route(
	file: UploadFile = File(...),
	task: TaskKind = Form(...),
	report_type: Optional[str] = Form(default=None),
	client: StructuredModelClient = Depends(get_model_client),
) -> AnalysisResponse:
	file_bytes = await file.read(settings.max_upload_bytes + 1)
	if not file_bytes:
		raise HTTPException(status_code=400, detail="Uploaded file is empty")
	if len(file_bytes) > settings.max_upload_bytes:
		raise HTTPException(
			status_code=413,
			detail=f"Uploaded file exceeds the {settings.max_upload_bytes} byte limit",
		)

	content_type = (file.content_type or "application/octet-stream").lower()
	document = f"data:{content_type};base64,{base64.b64encode(file_bytes).decode('ascii')}"
	pipeline_logs = [f"Upload received: {file.filename or 'unnamed'} ({len(file_bytes)} bytes)"]
	return await _analyze(document, task, client, report_type, pipeline_logs)
