"""Pydantic schemas for wizard submissions and the runner view.

`answers` is the wire format shared with other subsystems: a flat object
keyed by field `name`, values `string | number | boolean | string[]`.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator

from stepform.schemas.validators import validate_email
from stepform.schemas.wizard import WizardField

AnswerValue = bool | int | float | str | list[str]
AnswerMap = dict[str, AnswerValue]


class SubmissionStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Submission(BaseModel):
    """Resumable runtime state. `current_step` indexes the visible steps."""

    id: str
    template_id: str
    status: SubmissionStatus = SubmissionStatus.IN_PROGRESS
    current_step: int = 0
    answers: AnswerMap = {}
    submitter_name: str | None = None
    submitter_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("answers", mode="before")
    @classmethod
    def _drop_nulls(cls, v):
        # JSON null means "not answered"
        if isinstance(v, dict):
            return {k: val for k, val in v.items() if val is not None}
        return v

    @property
    def is_completed(self) -> bool:
        return self.status == SubmissionStatus.COMPLETED


# ── Requests ────────────────────────────────────────────────

class SubmissionCreate(BaseModel):
    template_id: str
    submitter_name: str | None = None
    submitter_email: str | None = None

    @field_validator("submitter_email")
    @classmethod
    def _check_email(cls, v: str | None) -> str | None:
        if not v:
            return None
        return validate_email(v)


class AnswersBody(BaseModel):
    """Answers typed on the current step; null clears an answer.

    Templates without save-progress keep no server-side state between
    requests, so the client echoes back `current_step` and the full
    answer map it was last shown.
    """
    answers: dict[str, AnswerValue | None] = {}
    current_step: int | None = None


# ── Responses ───────────────────────────────────────────────

class SubmissionSummary(BaseModel):
    id: str
    template_id: str
    status: SubmissionStatus
    current_step: int
    submitter_name: str | None
    submitter_email: str | None
    created_at: datetime | None
    updated_at: datetime | None
    completed_at: datetime | None

    model_config = {"from_attributes": True}


class StepView(BaseModel):
    id: str | None
    title: str
    description: str | None
    fields: list[WizardField]


class RunnerView(BaseModel):
    submission_id: str
    template_id: str
    template_name: str
    status: SubmissionStatus
    current_step: int
    total_steps: int
    is_first_step: bool
    is_last_step: bool
    progress_percent: int | None = None
    step: StepView | None = None
    answers: AnswerMap
    errors: dict[str, str] = {}
    advanced: bool | None = None
    completion_message: str | None = None


# ── Completion / export ─────────────────────────────────────

class MappedAnswer(BaseModel):
    field_name: str
    external_mapping: str
    value: AnswerValue
    orphaned: bool = False


class CompletionPayload(BaseModel):
    template_id: str
    submission_id: str
    answers: AnswerMap
    mappings: list[MappedAnswer]
    orphaned_fields: list[str]


class ExportResponse(BaseModel):
    payload: CompletionPayload
    crm: dict[str, dict[str, str]]
