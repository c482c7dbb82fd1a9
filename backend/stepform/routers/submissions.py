"""Wizard runner router: one respondent's run through a template.

Endpoints:
    GET  /api/wizard-submissions/               List submissions (paginated)
    POST /api/wizard-submissions/               Start a run (201)
    GET  /api/wizard-submissions/{id}           Runner view
    POST /api/wizard-submissions/{id}/next      Apply answers, validate, advance
    POST /api/wizard-submissions/{id}/prev      Apply answers, step back
    POST /api/wizard-submissions/{id}/export    Completion payload + CRM records

Validation failures on /next are returned in the view (`errors`,
`advanced=false`) with status 200.
"""

from fastapi import APIRouter, Depends, Query

from stepform.config import settings
from stepform.deps import get_submission_store, get_template_repository
from stepform.schemas.common import PaginatedResponse
from stepform.schemas.submission import (
    AnswersBody,
    ExportResponse,
    RunnerView,
    SubmissionCreate,
    SubmissionStatus,
    SubmissionSummary,
)
from stepform.services import wizard_service
from stepform.services.submission_store import SqlSubmissionStore
from stepform.services.template_store import SqlTemplateRepository

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[SubmissionSummary])
async def list_submissions(
    template_id: str | None = None,
    status: SubmissionStatus | None = None,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    store: SqlSubmissionStore = Depends(get_submission_store),
):
    items, total = await store.list_submissions(
        template_id=template_id, status=status, limit=limit, offset=offset
    )
    return PaginatedResponse(items=items, total=total, limit=limit, offset=offset)


@router.post("/", response_model=RunnerView, status_code=201)
async def start_submission(
    body: SubmissionCreate,
    repo: SqlTemplateRepository = Depends(get_template_repository),
    store: SqlSubmissionStore = Depends(get_submission_store),
):
    """Start a run on a published template."""
    runner = await wizard_service.start_submission(repo, store, body)
    return wizard_service.runner_view(runner)


@router.get("/{submission_id}", response_model=RunnerView)
async def get_submission(
    submission_id: str,
    repo: SqlTemplateRepository = Depends(get_template_repository),
    store: SqlSubmissionStore = Depends(get_submission_store),
):
    runner = await wizard_service.open_runner(repo, store, submission_id)
    return wizard_service.runner_view(runner)


@router.post("/{submission_id}/next", response_model=RunnerView)
async def next_step(
    submission_id: str,
    body: AnswersBody,
    repo: SqlTemplateRepository = Depends(get_template_repository),
    store: SqlSubmissionStore = Depends(get_submission_store),
):
    runner = await wizard_service.open_runner(
        repo, store, submission_id, client_step=body.current_step, client_answers=body.answers
    )
    outcome = await wizard_service.submit_next(runner, body.answers)
    return wizard_service.runner_view(runner, advanced=outcome.advanced)


@router.post("/{submission_id}/prev", response_model=RunnerView)
async def prev_step(
    submission_id: str,
    body: AnswersBody,
    repo: SqlTemplateRepository = Depends(get_template_repository),
    store: SqlSubmissionStore = Depends(get_submission_store),
):
    runner = await wizard_service.open_runner(
        repo, store, submission_id, client_step=body.current_step, client_answers=body.answers
    )
    outcome = await wizard_service.submit_prev(runner, body.answers)
    return wizard_service.runner_view(runner, advanced=outcome.advanced)


@router.post("/{submission_id}/export", response_model=ExportResponse)
async def export_submission(
    submission_id: str,
    repo: SqlTemplateRepository = Depends(get_template_repository),
    store: SqlSubmissionStore = Depends(get_submission_store),
):
    """Only completed submissions can be exported (422 otherwise)."""
    return await wizard_service.export_submission(repo, store, submission_id)
