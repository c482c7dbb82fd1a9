"""Wizard run orchestration for the HTTP layer.

Every request rebuilds a `WizardRunner` from a freshly loaded submission
and template, applies the typed answers, then performs one navigation.
Covers:
  - Starting a run on a published template
  - Next / previous with validation errors returned as data
  - Export of a completed run (payload + CRM records)
"""

import logging
from typing import Any

from stepform.engine.completion import apply_mappings, build_completion_payload
from stepform.engine.errors import TemplateNotRunnableError
from stepform.engine.persistence import SubmissionStore, TemplateSource
from stepform.engine.runtime import StepOutcome, WizardRunner
from stepform.schemas.submission import (
    ExportResponse,
    RunnerView,
    StepView,
    SubmissionCreate,
)
from stepform.schemas.wizard import TemplateStatus
from stepform.services.crm_mapping import CrmRecordCollector

logger = logging.getLogger(__name__)


async def open_runner(
    templates: TemplateSource,
    store: SubmissionStore,
    submission_id: str,
    client_step: int | None = None,
    client_answers: dict[str, Any] | None = None,
) -> WizardRunner:
    """Load a submission and its template into a runner.

    `client_step` is honoured only for templates that do not save
    progress, where the client is the one holding the run state; the
    echoed answers are merged in first so the step pointer is checked
    against the same visible steps the client saw. The run is then moved
    back to the first earlier step that does not validate.
    """
    submission = await store.load_submission(submission_id)
    template = await templates.get_template(submission.template_id)
    client_held = (
        client_step is not None
        and not template.allow_save_progress
        and not submission.is_completed
    )
    if client_held:
        answers = {**submission.answers, **(client_answers or {})}
        submission = submission.model_copy(
            update={
                "current_step": client_step,
                "answers": {k: v for k, v in answers.items() if v is not None},
            }
        )
    runner = WizardRunner(template, submission, store)
    if client_held:
        runner.rewind_to_invalid_step()
    return runner


def runner_view(runner: WizardRunner, advanced: bool | None = None) -> RunnerView:
    template = runner.template
    completed = runner.is_completed
    step = None if completed else runner.current_step

    progress = None
    if template.show_progress_bar:
        progress = 100 if completed else runner.progress_percent()

    return RunnerView(
        submission_id=runner.submission.id,
        template_id=template.id,
        template_name=template.name,
        status=runner.submission.status,
        current_step=runner.step_index,
        total_steps=runner.total_steps,
        is_first_step=runner.step_index == 0,
        is_last_step=runner.is_last_step,
        progress_percent=progress,
        step=(
            StepView(
                id=step.id,
                title=step.title,
                description=step.description,
                fields=runner.visible_fields(),
            )
            if step
            else None
        ),
        answers=dict(runner.answers),
        errors=dict(runner.errors),
        advanced=advanced,
        completion_message=template.completion_message if completed else None,
    )


async def start_submission(
    templates: TemplateSource,
    store,
    body: SubmissionCreate,
) -> WizardRunner:
    """Create an IN_PROGRESS submission at step 0 with no answers."""
    template = await templates.get_template(body.template_id)
    if template.status != TemplateStatus.PUBLISHED:
        raise TemplateNotRunnableError(
            f"Template {template.id} is {template.status.value}, not PUBLISHED"
        )
    if not template.steps:
        raise TemplateNotRunnableError(f"Template {template.id} has no steps")

    submission = await store.create_submission(
        template.id,
        submitter_name=body.submitter_name,
        submitter_email=body.submitter_email,
    )
    return WizardRunner(template, submission, store)


def _apply_answers(runner: WizardRunner, answers: dict[str, Any]) -> None:
    for name, value in answers.items():
        runner.set_answer(name, value)


async def submit_next(runner: WizardRunner, answers: dict[str, Any]) -> StepOutcome:
    _apply_answers(runner, answers)
    outcome = await runner.go_next()
    if outcome.errors:
        logger.debug(
            f"Submission {runner.submission.id}: step {outcome.step_index} "
            f"rejected ({', '.join(sorted(outcome.errors))})"
        )
    return outcome


async def submit_prev(runner: WizardRunner, answers: dict[str, Any]) -> StepOutcome:
    _apply_answers(runner, answers)
    return await runner.go_prev()


async def export_submission(
    templates: TemplateSource,
    store: SubmissionStore,
    submission_id: str,
) -> ExportResponse:
    """Completion payload plus the client/contact records it maps to."""
    submission = await store.load_submission(submission_id)
    template = await templates.get_template(submission.template_id)
    payload = build_completion_payload(template, submission)

    collector = CrmRecordCollector()
    applied = apply_mappings(payload, collector)
    if payload.orphaned_fields:
        logger.info(
            f"Submission {submission_id}: {len(payload.orphaned_fields)} orphaned "
            f"answers not mapped"
        )
    logger.debug(f"Submission {submission_id}: {applied} CRM values collected")
    return ExportResponse(payload=payload, crm=collector.records)
