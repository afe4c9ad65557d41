from __future__ import annotations


class ExtractionError(Exception):
	"""Base class for every failure the extraction pipeline surfaces to callers."""

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class RejectedInput(ExtractionError, ValueError):
	"""The document/task pair failed pre-flight validation; the model was never called."""


class ModelFailure(ExtractionError):
	"""The hosted model call itself errored (network, quota, auth, configuration)."""


class EmptyResponse(ExtractionError):
	"""The model returned no structured output."""


class InvalidShape(ExtractionError):
	"""The model output is missing a mandatory field or has the wrong shape."""
