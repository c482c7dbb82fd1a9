"""SQL implementation of the submission persistence collaborator.

Every write commits on its own, so the progress snapshot taken during
finalization is durable before the completion write is attempted.
Database failures surface as `PersistenceError` and the session is
rolled back.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stepform.engine.errors import PersistenceError, SubmissionCompletedError
from stepform.middleware.exceptions import ResourceNotFoundError
from stepform.models.submission import WizardSubmission
from stepform.schemas.submission import (
    AnswerMap,
    Submission,
    SubmissionStatus,
    SubmissionSummary,
)

logger = logging.getLogger(__name__)


class SqlSubmissionStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, submission_id: str) -> WizardSubmission:
        try:
            result = await self.db.execute(
                select(WizardSubmission).where(WizardSubmission.id == submission_id)
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to load submission {submission_id}: {e}")
            raise PersistenceError("Could not load submission", submission_id) from e
        row = result.scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundError("Wizard submission", submission_id)
        return row

    async def _commit(self, submission_id: str, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action} submission {submission_id}: {e}")
            raise PersistenceError(f"Could not {action} submission", submission_id) from e

    async def create_submission(
        self,
        template_id: str,
        submitter_name: str | None = None,
        submitter_email: str | None = None,
    ) -> Submission:
        row = WizardSubmission(
            template_id=template_id,
            status=SubmissionStatus.IN_PROGRESS.value,
            current_step=0,
            answers={},
            submitter_name=submitter_name,
            submitter_email=submitter_email,
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Could not create submission") from e
        await self._commit(row.id, "create")
        logger.info(f"Started submission {row.id} for template {template_id}")
        return Submission.model_validate(row)

    async def load_submission(self, submission_id: str) -> Submission:
        return Submission.model_validate(await self._get_row(submission_id))

    async def save_progress(
        self, submission_id: str, current_step: int, answers: AnswerMap
    ) -> None:
        row = await self._get_row(submission_id)
        if row.status == SubmissionStatus.COMPLETED.value:
            raise SubmissionCompletedError(submission_id)

        # Replace, never merge
        row.current_step = current_step
        row.answers = dict(answers)
        await self._commit(submission_id, "save")

    async def mark_completed(
        self, submission_id: str, current_step: int, answers: AnswerMap
    ) -> None:
        row = await self._get_row(submission_id)
        if row.status == SubmissionStatus.COMPLETED.value:
            raise SubmissionCompletedError(submission_id)

        row.current_step = current_step
        row.answers = dict(answers)
        row.status = SubmissionStatus.COMPLETED.value
        row.completed_at = datetime.utcnow()
        await self._commit(submission_id, "complete")

    async def list_submissions(
        self,
        template_id: str | None = None,
        status: SubmissionStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[SubmissionSummary], int]:
        query = select(WizardSubmission)
        if template_id:
            query = query.where(WizardSubmission.template_id == template_id)
        if status:
            query = query.where(WizardSubmission.status == status.value)

        total = (
            await self.db.execute(select(func.count()).select_from(query.subquery()))
        ).scalar() or 0

        result = await self.db.execute(
            query.order_by(WizardSubmission.updated_at.desc()).limit(limit).offset(offset)
        )
        items = [SubmissionSummary.model_validate(s) for s in result.scalars().all()]
        return items, total
