"""Exceptions raised by the wizard engine.

These carry no web-framework dependency; the HTTP layer maps them to
responses in `stepform.middleware.exceptions`.

Validation failures are NOT exceptions; `validate_step` returns them
as a `{field_name: message}` dict.
"""


class WizardError(Exception):
    """Base class for wizard engine errors."""


class SubmissionCompletedError(WizardError):
    """A mutating operation was attempted on a COMPLETED submission."""

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} is already completed")


class PersistenceError(WizardError):
    """A persistence collaborator failed to write.

    Always retriable: the runtime keeps its in-memory answers, so the
    caller can re-send the same snapshot.
    """

    retriable = True

    def __init__(self, message: str, submission_id: str | None = None):
        self.submission_id = submission_id
        super().__init__(message)


class TemplateNotRunnableError(WizardError):
    """The template cannot be run (no steps, or not published)."""


class SubmissionNotCompletedError(WizardError):
    """Export was requested for a submission that is still in progress."""

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} is not completed yet")
