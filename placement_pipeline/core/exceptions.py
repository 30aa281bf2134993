"""
Pipeline error taxonomy.

Services raise these; the FastAPI app turns them into JSON responses
(see placement_pipeline.main). None of them are retried:
they are business-rule violations, not transient failures.
"""

from typing import Any, Dict, Optional

from placement_pipeline.schemas.schemas import ErrorResponse


class PipelineError(Exception):
    """Base class for every error the pipeline reports to its caller."""

    code = "pipeline_error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return ErrorResponse(
            error=self.code,
            detail=self.message,
            details=self.details or None
        ).model_dump(exclude_none=True)


class NotFoundError(PipelineError):
    """
    Job offer, application or profile does not exist.

    Also used when the job offer exists but belongs to another company,
    so callers cannot probe for other companies' offers.
    """

    code = "not_found"
    status_code = 404


class ConflictError(PipelineError):
    """Duplicate application for the same (student, job offer)."""

    code = "conflict"
    status_code = 409


class InvalidStateError(PipelineError):
    """A transition's precondition does not hold."""

    code = "invalid_state"
    status_code = 400


class ExpiredError(PipelineError):
    """Job offer no longer accepts applications."""

    code = "expired"
    status_code = 400


class ValidationError(PipelineError):
    """Malformed input: empty id list, non-positive round number, bad paging."""

    code = "validation_error"
    status_code = 422
