"""FastAPI dependencies wiring the SQL collaborators to a request session.

Tests override these with in-memory fakes via `app.dependency_overrides`.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stepform.database import get_db
from stepform.services.submission_store import SqlSubmissionStore
from stepform.services.template_store import SqlTemplateRepository


async def get_template_repository(
    db: AsyncSession = Depends(get_db),
) -> SqlTemplateRepository:
    return SqlTemplateRepository(db)


async def get_submission_store(
    db: AsyncSession = Depends(get_db),
) -> SqlSubmissionStore:
    return SqlSubmissionStore(db)
