"""Wizard runtime: drives one submission through a template.

States:
    ANSWERING(step)  →  ANSWERING(step + 1)  →  …  →  FINALIZING  →  COMPLETED

Every operation is meant to run against a freshly loaded Submission
snapshot. `set_answer` and `go_prev` without save-progress touch memory
only; `go_next` / `go_prev` with save-progress perform one durable write.

Step indexes always refer to the CURRENT list of visible steps, which is
recomputed from the answers before any index arithmetic: an earlier
answer can add or remove later steps.

Answers to fields that become hidden are kept. They are excluded from
validation and step counting but stay in the answer map until cleared.

A run only completes when every visible step validates, not just the
last one.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stepform.engine.conditions import visible_fields, visible_steps
from stepform.engine.errors import (
    PersistenceError,
    SubmissionCompletedError,
    TemplateNotRunnableError,
)
from stepform.engine.persistence import SubmissionStore
from stepform.engine.validation import validate_step
from stepform.schemas.submission import AnswerMap, Submission, SubmissionStatus
from stepform.schemas.wizard import WizardField, WizardStep, WizardTemplate

logger = logging.getLogger(__name__)


class RunnerState(str, Enum):
    ANSWERING = "ANSWERING"
    FINALIZING = "FINALIZING"
    COMPLETED = "COMPLETED"


@dataclass
class StepOutcome:
    """Result of a navigation attempt."""
    advanced: bool
    step_index: int
    errors: dict[str, str] = field(default_factory=dict)
    completed: bool = False


class WizardRunner:
    def __init__(
        self,
        template: WizardTemplate,
        submission: Submission,
        store: SubmissionStore,
    ):
        if not template.steps:
            raise TemplateNotRunnableError(f"Template {template.id} has no steps")

        self.template = template
        self.submission = submission
        self.store = store
        self.answers: AnswerMap = dict(submission.answers)
        self.errors: dict[str, str] = {}

        if submission.status == SubmissionStatus.COMPLETED:
            self.state = RunnerState.COMPLETED
        else:
            self.state = RunnerState.ANSWERING

        # Resume: earlier answers may since have hidden steps
        total = len(self.visible_steps())
        self.step_index = max(0, min(submission.current_step, total - 1))
        if self.step_index != submission.current_step:
            logger.debug(
                f"Submission {submission.id}: clamped step {submission.current_step} "
                f"to {self.step_index} ({total} visible)"
            )

    # ── Derived views ───────────────────────────────────────

    def visible_steps(self) -> list[WizardStep]:
        return visible_steps(self.template, self.answers)

    @property
    def current_step(self) -> WizardStep | None:
        steps = self.visible_steps()
        if not steps:
            return None
        return steps[min(self.step_index, len(steps) - 1)]

    def visible_fields(self) -> list[WizardField]:
        step = self.current_step
        return visible_fields(step, self.answers) if step else []

    @property
    def total_steps(self) -> int:
        return len(self.visible_steps())

    @property
    def is_last_step(self) -> bool:
        return self.step_index >= self.total_steps - 1

    @property
    def is_completed(self) -> bool:
        return self.state == RunnerState.COMPLETED

    def progress_percent(self) -> int:
        total = self.total_steps
        if total == 0:
            return 0
        return round((self.step_index + 1) / total * 100)

    # ── Answering ───────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self.state == RunnerState.COMPLETED:
            raise SubmissionCompletedError(self.submission.id)

    def set_answer(self, field_name: str, value: Any) -> None:
        """Record an answer in memory and clear that field's error.

        A None value clears the answer.
        """
        self._ensure_open()
        if value is None:
            self.answers.pop(field_name, None)
        else:
            self.answers[field_name] = value
        self.errors.pop(field_name, None)

    def clear_answer(self, field_name: str) -> None:
        self.set_answer(field_name, None)

    def rewind_to_invalid_step(self) -> dict[str, str]:
        """Move back to the first visible step before the current one that
        fails validation, and return its errors.

        A step pointer held by the client, or an answer changed after going
        back, can leave a required field on an earlier step empty.
        """
        for index, step in enumerate(self.visible_steps()[: self.step_index]):
            errors = validate_step(visible_fields(step, self.answers), self.answers)
            if errors:
                logger.debug(
                    f"Submission {self.submission.id}: step {index} no longer valid, "
                    f"back from {self.step_index}"
                )
                self.step_index = index
                self.errors = errors
                return errors
        return {}

    # ── Navigation ──────────────────────────────────────────

    async def _save_progress(self) -> None:
        try:
            await self.store.save_progress(self.submission.id, self.step_index, self.answers)
        except PersistenceError:
            logger.warning(
                f"Progress save failed for submission {self.submission.id} "
                f"at step {self.step_index}; answers kept in memory"
            )
            raise

    async def go_next(self) -> StepOutcome:
        """Validate the current step, then advance or finalize."""
        self._ensure_open()

        errors = validate_step(self.visible_fields(), self.answers)
        if errors:
            self.errors = errors
            return StepOutcome(advanced=False, step_index=self.step_index, errors=errors)
        self.errors = {}

        if self.is_last_step:
            errors = self.rewind_to_invalid_step()
            if errors:
                return StepOutcome(advanced=False, step_index=self.step_index, errors=errors)
            await self._finalize()
            return StepOutcome(advanced=True, step_index=self.step_index, completed=True)

        self.step_index += 1
        logger.debug(f"Submission {self.submission.id}: advanced to step {self.step_index}")
        if self.template.allow_save_progress:
            await self._save_progress()
        return StepOutcome(advanced=True, step_index=self.step_index)

    async def go_prev(self) -> StepOutcome:
        """Step back one visible step. No validation; no-op on the first step."""
        self._ensure_open()

        # Step back from the step actually shown, which may be clamped
        shown = min(self.step_index, self.total_steps - 1)
        if shown <= 0:
            self.step_index = 0
            return StepOutcome(advanced=False, step_index=0)

        self.step_index = shown - 1
        self.errors = {}
        logger.debug(f"Submission {self.submission.id}: back to step {self.step_index}")
        if self.template.allow_save_progress:
            await self._save_progress()
        return StepOutcome(advanced=True, step_index=self.step_index)

    async def _finalize(self) -> None:
        """Write the final snapshot, then complete.

        With save-progress enabled the snapshot is written first, so a
        failure on completion leaves a resumable IN_PROGRESS submission
        holding every answer. Local state only flips to COMPLETED once the
        completion write succeeds.
        """
        self.state = RunnerState.FINALIZING
        try:
            if self.template.allow_save_progress:
                await self.store.save_progress(
                    self.submission.id, self.step_index, self.answers
                )
            await self.store.mark_completed(
                self.submission.id, self.step_index, self.answers
            )
        except PersistenceError:
            self.state = RunnerState.ANSWERING
            logger.warning(
                f"Finalization failed for submission {self.submission.id}; "
                f"still IN_PROGRESS and retriable"
            )
            raise

        self.state = RunnerState.COMPLETED
        self.submission = self.submission.model_copy(
            update={
                "status": SubmissionStatus.COMPLETED,
                "current_step": self.step_index,
                "answers": dict(self.answers),
            }
        )
        logger.info(f"Submission {self.submission.id} completed")
