"""Wizard template authoring router.

Endpoints:
    GET  /api/wizards/                  List templates (paginated)
    POST /api/wizards/                  Create template with steps + fields
    GET  /api/wizards/{id}              Fully hydrated template
    POST /api/wizards/{id}/publish      Integrity check, then PUBLISHED
    POST /api/wizards/{id}/archive      ARCHIVED
    POST /api/wizards/{id}/duplicate    Deep copy as DRAFT
"""

from fastapi import APIRouter, Depends, Query

from stepform.config import settings
from stepform.deps import get_template_repository
from stepform.schemas.common import PaginatedResponse
from stepform.schemas.wizard import (
    TemplateCreate,
    TemplateStatus,
    TemplateSummary,
    WizardTemplate,
)
from stepform.services.template_store import SqlTemplateRepository

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[TemplateSummary])
async def list_templates(
    status: TemplateStatus | None = None,
    category: str | None = None,
    search: str | None = None,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    repo: SqlTemplateRepository = Depends(get_template_repository),
):
    items, total = await repo.list_templates(
        status=status, category=category, search=search, limit=limit, offset=offset
    )
    return PaginatedResponse(items=items, total=total, limit=limit, offset=offset)


@router.post("/", response_model=WizardTemplate, status_code=201)
async def create_template(
    body: TemplateCreate,
    repo: SqlTemplateRepository = Depends(get_template_repository),
):
    """Create a DRAFT template; the slug is derived from the name."""
    return await repo.create_template(body)


@router.get("/{template_id}", response_model=WizardTemplate)
async def get_template(
    template_id: str,
    repo: SqlTemplateRepository = Depends(get_template_repository),
):
    return await repo.get_template(template_id)


@router.post("/{template_id}/publish", response_model=WizardTemplate)
async def publish_template(
    template_id: str,
    repo: SqlTemplateRepository = Depends(get_template_repository),
):
    """Publish after the integrity check; 422 lists every problem found."""
    return await repo.set_status(template_id, TemplateStatus.PUBLISHED)


@router.post("/{template_id}/archive", response_model=WizardTemplate)
async def archive_template(
    template_id: str,
    repo: SqlTemplateRepository = Depends(get_template_repository),
):
    return await repo.set_status(template_id, TemplateStatus.ARCHIVED)


@router.post("/{template_id}/duplicate", response_model=WizardTemplate, status_code=201)
async def duplicate_template(
    template_id: str,
    repo: SqlTemplateRepository = Depends(get_template_repository),
):
    return await repo.duplicate(template_id)
