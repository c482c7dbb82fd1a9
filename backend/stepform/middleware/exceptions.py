"""Custom exception handlers for consistent error responses.

Every error leaves the API in one envelope. Wizard engine exceptions
(`stepform.engine.errors`) carry no HTTP knowledge; they are mapped to
status codes here.
"""

import logging
from typing import Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from stepform.engine.errors import (
    PersistenceError,
    SubmissionCompletedError,
    SubmissionNotCompletedError,
    TemplateNotRunnableError,
)

logger = logging.getLogger(__name__)


class StepFormException(Exception):
    """Base exception for StepForm application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Union[dict, list, None] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(StepFormException):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class DuplicateResourceError(StepFormException):
    """Exception for unique-key collisions (e.g. template slug)."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_RECORD",
        )


class TemplateIntegrityError(StepFormException):
    """A template failed the structural checks required to publish it."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(
            message="Template cannot be published",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="TEMPLATE_INTEGRITY_ERROR",
            details={"problems": problems},
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """`{"error": {"code", "message", "details"}}`; details only when set."""
    error = {"code": error_code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


async def stepform_exception_handler(
    request: Request,
    exc: StepFormException,
) -> JSONResponse:
    """Not found, duplicate names and publish-time integrity failures."""
    logger.warning(
        f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}"
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
    )


async def submission_completed_handler(
    request: Request,
    exc: SubmissionCompletedError,
) -> JSONResponse:
    """Mutations on a COMPLETED submission are rejected outright."""
    logger.warning(
        f"Rejected mutation of completed submission {exc.submission_id}",
        extra={"path": request.url.path, "method": request.method},
    )
    return create_error_response(
        status_code=status.HTTP_409_CONFLICT,
        message=str(exc),
        error_code="SUBMISSION_COMPLETED",
    )


async def persistence_exception_handler(
    request: Request,
    exc: PersistenceError,
) -> JSONResponse:
    """Progress or completion write failed; the client may retry."""
    logger.error(
        f"Persistence error on {request.url.path}: {exc}",
        extra={"path": request.url.path, "method": request.method},
    )
    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Could not save the submission. Please try again.",
        error_code="PERSISTENCE_ERROR",
        details={"retriable": True},
    )


async def wizard_state_handler(
    request: Request,
    exc: Union[TemplateNotRunnableError, SubmissionNotCompletedError],
) -> JSONResponse:
    """Template not runnable, or export requested too early."""
    logger.warning(
        f"Wizard state error on {request.url.path}: {exc}",
        extra={"path": request.url.path, "method": request.method},
    )
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message=str(exc),
        error_code=(
            "TEMPLATE_NOT_RUNNABLE"
            if isinstance(exc, TemplateNotRunnableError)
            else "SUBMISSION_NOT_COMPLETED"
        ),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Unknown routes and methods, in the same envelope as everything else."""
    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed template or submission bodies.

    Answer-level problems never get here: the runner returns those as
    per-field errors on a 200 response.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.info(f"Rejected request body on {request.url.path}: {len(errors)} error(s)")
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Request body is not valid",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def integrity_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """A slug taken by a concurrent create, or another constraint failure."""
    logger.error(f"Integrity error on {request.url.path}: {exc.orig}")
    if "unique" in str(exc.orig).lower():
        return create_error_response(
            status_code=status.HTTP_409_CONFLICT,
            message="A wizard with this name already exists",
            error_code="DUPLICATE_RECORD",
        )
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="The wizard data violates a database constraint",
        error_code="INTEGRITY_ERROR",
    )


async def database_unavailable_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Template reads and listings that hit a dropped connection."""
    logger.error(f"Database unavailable on {request.url.path}: {exc.orig}")
    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Wizard storage is unavailable. Please try again.",
        error_code="DATABASE_UNAVAILABLE",
        details={"retriable": True},
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(StepFormException, stepform_exception_handler)
    app.add_exception_handler(SubmissionCompletedError, submission_completed_handler)
    app.add_exception_handler(PersistenceError, persistence_exception_handler)
    app.add_exception_handler(TemplateNotRunnableError, wizard_state_handler)
    app.add_exception_handler(SubmissionNotCompletedError, wizard_state_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
