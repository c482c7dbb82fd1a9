"""Boundary contracts the wizard runtime depends on.

Implementations live outside the engine (see
`stepform.services.submission_store` and
`stepform.services.template_store`). The persisted submission is a
last-write-wins document keyed by submission id: re-sending the same
`(current_step, answers)` snapshot must be harmless.

Two clients resuming the same submission concurrently are not
arbitrated: the last write wins and nothing is merged.
"""

from typing import Protocol

from stepform.schemas.submission import AnswerMap, AnswerValue, Submission
from stepform.schemas.wizard import WizardTemplate


class SubmissionStore(Protocol):
    async def load_submission(self, submission_id: str) -> Submission:
        ...

    async def save_progress(
        self, submission_id: str, current_step: int, answers: AnswerMap
    ) -> None:
        """Replace the step pointer and answers. Raises PersistenceError."""
        ...

    async def mark_completed(
        self, submission_id: str, current_step: int, answers: AnswerMap
    ) -> None:
        """Move the submission to COMPLETED with its final snapshot.

        Raises PersistenceError on failure, leaving it IN_PROGRESS.
        """
        ...


class TemplateSource(Protocol):
    async def get_template(self, template_id: str) -> WizardTemplate:
        """Return a fully hydrated template. Never mutates it."""
        ...


class MappingAdapter(Protocol):
    """Consumes `external_mapping` strings after completion."""

    def apply_mapping(self, mapping: str, value: AnswerValue) -> None:
        ...
