"""Completion payload for the export collaborator.

Built only for COMPLETED submissions. All answers are handed over;
answers whose field is hidden under the final answers, or whose key
belongs to no field of the template, are flagged as orphaned and the
consumer decides what to do with them.

`external_mapping` strings are passed through untouched; interpreting
them is the adapter's job.
"""

import logging

from stepform.engine.conditions import evaluate
from stepform.engine.errors import SubmissionNotCompletedError
from stepform.engine.persistence import MappingAdapter
from stepform.engine.values import is_empty
from stepform.schemas.submission import CompletionPayload, MappedAnswer, Submission
from stepform.schemas.wizard import WizardTemplate

logger = logging.getLogger(__name__)


def visible_field_names(template: WizardTemplate, answers: dict) -> set[str]:
    """Names of fields visible under `answers` (step AND field condition)."""
    names: set[str] = set()
    for step in template.steps:
        if not evaluate(step.condition, answers):
            continue
        for field in step.fields:
            if evaluate(field.condition, answers):
                names.add(field.name)
    return names


def build_completion_payload(
    template: WizardTemplate, submission: Submission
) -> CompletionPayload:
    if not submission.is_completed:
        raise SubmissionNotCompletedError(submission.id)

    answers = dict(submission.answers)
    visible = visible_field_names(template, answers)
    orphaned = sorted(name for name in answers if name not in visible)

    mappings: list[MappedAnswer] = []
    for _, _, field in template.iter_fields():
        if not field.external_mapping or field.name not in answers:
            continue
        mappings.append(
            MappedAnswer(
                field_name=field.name,
                external_mapping=field.external_mapping,
                value=answers[field.name],
                orphaned=field.name not in visible,
            )
        )

    return CompletionPayload(
        template_id=submission.template_id,
        submission_id=submission.id,
        answers=answers,
        mappings=mappings,
        orphaned_fields=orphaned,
    )


def apply_mappings(
    payload: CompletionPayload,
    adapter: MappingAdapter,
    include_orphaned: bool = False,
) -> int:
    """Hand each non-empty mapped value to the adapter. Returns the count."""
    applied = 0
    for mapped in payload.mappings:
        if mapped.orphaned and not include_orphaned:
            continue
        if is_empty(mapped.value):
            continue
        adapter.apply_mapping(mapped.external_mapping, mapped.value)
        applied += 1
    logger.debug(f"Applied {applied} mappings for submission {payload.submission_id}")
    return applied
