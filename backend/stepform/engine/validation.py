"""Validation engine for wizard steps.

`validate_step(fields, answers)` runs against the VISIBLE fields of the
current step and returns `{field_name: message}`; an empty dict means the
step is valid. Failures are data, never exceptions.

Rules:
  - required: a required field must not be absent, "" or [].
  - type rules run only when a value is present, and only the rules the
    field type registry enables for that type.
"""

import logging
import re
from typing import Any

from stepform.engine.field_types import spec_for
from stepform.engine.values import is_empty, stringify, to_number
from stepform.schemas.validators import is_valid_email
from stepform.schemas.wizard import WizardField

logger = logging.getLogger(__name__)

REQUIRED = "required"
INVALID_EMAIL = "invalid email"
NOT_A_NUMBER = "must be a number"
INVALID_OPTION = "invalid option"
PATTERN_MISMATCH = "does not match the expected format"


def _check_options(field: WizardField, value: Any, multi: bool) -> str | None:
    if not field.options:
        # Options are an authoring-time requirement; nothing to check against.
        return None
    allowed = {option.value for option in field.options}
    values = value if isinstance(value, (list, tuple)) else [value]
    if not multi and len(values) != 1:
        return INVALID_OPTION
    if any(stringify(v) not in allowed for v in values):
        return INVALID_OPTION
    return None


def _check_numeric(field: WizardField, value: Any) -> str | None:
    number = to_number(value)
    if number is None:
        return NOT_A_NUMBER
    rules = field.validation
    if rules is None:
        return None
    if rules.min is not None and number < rules.min:
        return f"must be at least {stringify(rules.min)}"
    if rules.max is not None and number > rules.max:
        return f"must be at most {stringify(rules.max)}"
    return None


def _check_length(field: WizardField, value: Any) -> str | None:
    rules = field.validation
    if rules is None:
        return None
    length = len(stringify(value))
    if rules.min_length is not None and length < rules.min_length:
        return f"must be at least {rules.min_length} characters"
    if rules.max_length is not None and length > rules.max_length:
        return f"must be at most {rules.max_length} characters"
    return None


def _check_pattern(field: WizardField, value: Any) -> str | None:
    rules = field.validation
    if rules is None or not rules.pattern:
        return None
    try:
        matched = re.fullmatch(rules.pattern, stringify(value))
    except re.error:
        logger.warning(f"Ignoring invalid pattern on field {field.name}: {rules.pattern!r}")
        return None
    return None if matched else PATTERN_MISMATCH


def validate_field(field: WizardField, value: Any) -> str | None:
    """Return the first error for one field, or None."""
    if is_empty(value):
        return REQUIRED if field.is_required else None

    spec = spec_for(field.type)

    if spec.format_check == "email" and not is_valid_email(stringify(value)):
        return INVALID_EMAIL
    if spec.needs_options:
        error = _check_options(field, value, spec.multi_valued)
        if error:
            return error
    if spec.numeric_bounds:
        error = _check_numeric(field, value)
        if error:
            return error
    if spec.length_bounds:
        error = _check_length(field, value)
        if error:
            return error
    if spec.pattern_check:
        return _check_pattern(field, value)
    return None


def validate_step(fields: list[WizardField], answers: dict[str, Any]) -> dict[str, str]:
    """Validate the visible fields of a step against the answer map."""
    errors: dict[str, str] = {}
    for field in fields:
        error = validate_field(field, answers.get(field.name))
        if error:
            errors[field.name] = error
    return errors
