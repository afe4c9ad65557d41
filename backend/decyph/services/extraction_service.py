from __future__ import annotations

import logging
from typing import List, Optional, Union

from decyph.core.errors import EmptyResponse, ExtractionError, ModelFailure
from decyph.models.schemas import ExtractionRequest, ExtractionResult, MediaPayload, ReportKind, TaskKind
from decyph.services.tasks import ExtractionTask, get_task
from decyph.services.validation_service import coerce_report_kind, coerce_task, validate_request
from decyph.services.vlm_client import StructuredModelClient

logger = logging.getLogger(__name__)


async def invoke(
	task: ExtractionTask,
	media: MediaPayload,
	client: StructuredModelClient,
	pipeline_logs: List[str],
) -> ExtractionResult:
	"""Single-shot extraction: one model call, then normalization.

	Raises ModelFailure when the call errors, EmptyResponse when the model
	returns no structured output for a task that has no empty result, and
	InvalidShape when the output lacks a mandatory field.
	"""
	prompt = task.render_prompt()
	pipeline_logs.append(f"Prompt rendered for {task.kind.value}" + (
		f" ({task.report_kind.value} report)" if task.report_kind else ""
	))

	try:
		raw_output = await client.generate(
			prompt,
			media,
			task.output_schema,
			system_prompt=task.system_prompt(),
		)
	except ExtractionError:
		raise
	except Exception as exc:
		logger.error("Model call failed for %r: %s", task, exc)
		raise ModelFailure(f"AI analysis failed: {exc}") from exc
	pipeline_logs.append("Model call completed")

	if raw_output is None:
		raw_output = task.empty_output()
		if raw_output is None:
			logger.error("Model returned no structured output for %r", task)
			raise EmptyResponse("AI analysis failed to produce a result")
		logger.warning("Model returned no structured output for %r; normalizing an empty result", task)
		pipeline_logs.append("Model returned no structured output")

	try:
		result = task.normalize(raw_output)
	except ExtractionError as exc:
		logger.error("Model output rejected for %r: %s", task, exc)
		raise
	pipeline_logs.append(f"Output normalized: {task.describe(result)}")
	return result


async def run_extraction(
	document: Optional[str],
	task: Union[TaskKind, str, None],
	client: StructuredModelClient,
	pipeline_logs: List[str],
	report_kind: Union[ReportKind, str, None] = None,
) -> ExtractionResult:
	"""Validate the document/task pair, then run the matching extraction task."""
	pipeline_logs.append("Workflow started: Validation -> Prompt -> Model call -> Normalization")
	media = validate_request(document, task, report_kind)
	task_kind = coerce_task(task)
	report = coerce_report_kind(report_kind) if task_kind is TaskKind.MEDICAL_REPORT else None
	pipeline_logs.append(f"Input validated: {media.kind.value} document ({media.mime_type})")

	extraction_task = get_task(task_kind, report)
	logger.info("Running %r on %s document", extraction_task, media.mime_type)
	result = await invoke(extraction_task, media, client, pipeline_logs)
	pipeline_logs.append("Workflow completed")
	return result


async def run_request(
	request: ExtractionRequest,
	client: StructuredModelClient,
	pipeline_logs: List[str],
) -> ExtractionResult:
	return await run_extraction(request.document, request.task, client, pipeline_logs, request.report_type)
