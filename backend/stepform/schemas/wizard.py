"""Pydantic schemas for wizard templates.

A template is an ordered list of steps, each an ordered list of fields.
Steps and fields may each carry one Condition gating their visibility.
The same models describe a hydrated template handed to the runtime and
the body accepted when a template is authored.

Conditions and validation rules are stored as JSON documents, so they
also accept the camelCase keys used by the form builder (`fieldId`,
`minLength`, `maxLength`).
"""

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator

from stepform.engine.field_types import FieldType
from stepform.engine.values import stringify
from stepform.schemas.validators import sanitize_string, validate_field_name


class TemplateStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Operator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    EMPTY = "empty"
    NOT_EMPTY = "notEmpty"


# ── Condition ───────────────────────────────────────────────

class Condition(BaseModel):
    """A single `{field, operator, value}` clause. No AND/OR composition."""

    model_config = {"frozen": True}

    field_id: str = Field(validation_alias=AliasChoices("field_id", "fieldId"))
    operator: Operator
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v):
        return stringify(v)


# ── Field ───────────────────────────────────────────────────

class FieldOption(BaseModel):
    label: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v):
        return stringify(v)


class FieldValidation(BaseModel):
    min: float | None = None
    max: float | None = None
    min_length: int | None = Field(
        default=None, validation_alias=AliasChoices("min_length", "minLength")
    )
    max_length: int | None = Field(
        default=None, validation_alias=AliasChoices("max_length", "maxLength")
    )
    pattern: str | None = None


class WizardField(BaseModel):
    id: str | None = None
    label: str
    name: str
    type: FieldType = FieldType.TEXT
    placeholder: str | None = None
    help_text: str | None = None
    is_required: bool = False
    sort_order: int = 0
    options: list[FieldOption] | None = None
    validation: FieldValidation | None = None
    default_value: str | None = None
    condition: Condition | None = None
    # Opaque to the engine; only the completion adapter reads it.
    external_mapping: str | None = None

    model_config = {"from_attributes": True}

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return validate_field_name(v)

    @field_validator("label")
    @classmethod
    def _check_label(cls, v: str) -> str:
        return sanitize_string(v)


# ── Step ────────────────────────────────────────────────────

class WizardStep(BaseModel):
    id: str | None = None
    title: str
    description: str | None = None
    sort_order: int = 0
    condition: Condition | None = None
    fields: list[WizardField] = []

    model_config = {"from_attributes": True}

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str) -> str:
        return sanitize_string(v)


# ── Template ────────────────────────────────────────────────

class WizardTemplate(BaseModel):
    """Fully hydrated template. Step and field order is evaluation order."""

    id: str | None = None
    name: str
    slug: str | None = None
    description: str | None = None
    category: str = "general"
    status: TemplateStatus = TemplateStatus.DRAFT
    allow_save_progress: bool = True
    show_progress_bar: bool = True
    completion_message: str | None = None
    steps: list[WizardStep] = []

    model_config = {"from_attributes": True}

    def iter_fields(self):
        """Yield `(step_index, step, field)` across the whole template."""
        for index, step in enumerate(self.steps):
            for field in step.fields:
                yield index, step, field


# ── Authoring ───────────────────────────────────────────────

class TemplateCreate(BaseModel):
    """Create a template with its steps and fields in one request.

    List order is authoritative: steps and fields are stored with
    `sort_order` equal to their position.
    """
    name: str = Field(..., max_length=200)
    description: str | None = None
    category: str = "general"
    allow_save_progress: bool = True
    show_progress_bar: bool = True
    completion_message: str | None = None
    steps: list[WizardStep] = []

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return sanitize_string(v)


class TemplateSummary(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None
    category: str
    status: TemplateStatus
    step_count: int
    created_at: datetime
    updated_at: datetime
