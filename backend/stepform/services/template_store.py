"""Template source: hydrated reads plus the authoring operations.

Reads go through `load_template`, which is cached in Redis. Any status
change or new template invalidates the `wizard_template:*` keys.
"""

import logging
import re
import unicodedata
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stepform.config import settings
from stepform.engine.integrity import check_template
from stepform.middleware.exceptions import (
    DuplicateResourceError,
    ResourceNotFoundError,
    TemplateIntegrityError,
)
from stepform.models.template import Template, TemplateField, TemplateStep
from stepform.schemas.wizard import (
    TemplateCreate,
    TemplateStatus,
    TemplateSummary,
    WizardStep,
    WizardTemplate,
)
from stepform.utils.cache import cached, invalidate_cache

logger = logging.getLogger(__name__)

CACHE_PREFIX = "wizard_template"


def slugify(value: str) -> str:
    """'Nuovo Cliente!' -> 'nuovo-cliente'"""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value).strip("-").lower()
    return value or "wizard"


async def _fetch_template_row(db: AsyncSession, template_id: str) -> Template | None:
    result = await db.execute(
        select(Template)
        .options(selectinload(Template.steps).selectinload(TemplateStep.fields))
        .where(Template.id == template_id)
    )
    return result.scalar_one_or_none()


@cached(ttl=settings.template_cache_ttl, prefix=CACHE_PREFIX, model=WizardTemplate)
async def load_template(db: AsyncSession, *, template_id: str) -> WizardTemplate:
    """Fully hydrated template, steps and fields ordered by sort_order."""
    row = await _fetch_template_row(db, template_id)
    if row is None:
        raise ResourceNotFoundError("Wizard template", template_id)
    return WizardTemplate.model_validate(row)


def _dump(model) -> dict | None:
    return model.model_dump(mode="json") if model is not None else None


def _build_steps(steps: list[WizardStep]) -> list[TemplateStep]:
    rows = []
    for step_order, step in enumerate(steps):
        fields = [
            TemplateField(
                label=field.label,
                name=field.name,
                type=field.type.value,
                placeholder=field.placeholder,
                help_text=field.help_text,
                is_required=field.is_required,
                sort_order=field_order,
                options=[o.model_dump() for o in field.options] if field.options else None,
                validation=_dump(field.validation),
                default_value=field.default_value,
                condition=_dump(field.condition),
                external_mapping=field.external_mapping,
            )
            for field_order, field in enumerate(step.fields)
        ]
        rows.append(
            TemplateStep(
                title=step.title,
                description=step.description,
                sort_order=step_order,
                condition=_dump(step.condition),
                fields=fields,
            )
        )
    return rows


class SqlTemplateRepository:
    """SQLAlchemy-backed template source."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_template(self, template_id: str) -> WizardTemplate:
        return await load_template(self.db, template_id=template_id)

    async def get_by_slug(self, slug: str) -> WizardTemplate | None:
        result = await self.db.execute(select(Template.id).where(Template.slug == slug))
        template_id = result.scalar_one_or_none()
        if template_id is None:
            return None
        return await self.get_template(template_id)

    async def list_templates(
        self,
        status: TemplateStatus | None = None,
        category: str | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[TemplateSummary], int]:
        query = select(Template)
        if status:
            query = query.where(Template.status == status.value)
        if category:
            query = query.where(Template.category == category)
        if search:
            like = f"%{search}%"
            query = query.where(or_(Template.name.ilike(like), Template.description.ilike(like)))

        total = (
            await self.db.execute(select(func.count()).select_from(query.subquery()))
        ).scalar() or 0

        result = await self.db.execute(
            query.options(selectinload(Template.steps))
            .order_by(Template.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        items = [
            TemplateSummary(
                id=t.id,
                name=t.name,
                slug=t.slug,
                description=t.description,
                category=t.category,
                status=TemplateStatus(t.status),
                step_count=len(t.steps),
                created_at=t.created_at,
                updated_at=t.updated_at,
            )
            for t in result.scalars().all()
        ]
        return items, total

    async def create_template(
        self,
        body: TemplateCreate,
        status: TemplateStatus = TemplateStatus.DRAFT,
        is_system: bool = False,
    ) -> WizardTemplate:
        slug = slugify(body.name)
        existing = await self.db.execute(select(Template.id).where(Template.slug == slug))
        if existing.scalar_one_or_none():
            raise DuplicateResourceError(f"A wizard named '{body.name}' already exists")

        template = Template(
            name=body.name,
            slug=slug,
            description=body.description,
            category=body.category,
            status=status.value,
            is_system=is_system,
            allow_save_progress=body.allow_save_progress,
            show_progress_bar=body.show_progress_bar,
            completion_message=body.completion_message,
            steps=_build_steps(body.steps),
        )
        self.db.add(template)
        await self.db.flush()
        logger.info(f"Created wizard template {template.id} ({slug})")
        return WizardTemplate.model_validate(template)

    async def set_status(self, template_id: str, status: TemplateStatus) -> WizardTemplate:
        row = await _fetch_template_row(self.db, template_id)
        if row is None:
            raise ResourceNotFoundError("Wizard template", template_id)

        if status == TemplateStatus.PUBLISHED:
            problems = check_template(WizardTemplate.model_validate(row))
            if problems:
                raise TemplateIntegrityError(problems)

        row.status = status.value
        # Invalidate only once the new status is visible to other sessions
        await self.db.commit()
        await invalidate_cache(f"{CACHE_PREFIX}:*")
        logger.info(f"Wizard template {template_id} is now {status.value}")
        return WizardTemplate.model_validate(row)

    async def duplicate(self, template_id: str) -> WizardTemplate:
        """Deep copy as a DRAFT named '<name> (copy)'."""
        original = await self.get_template(template_id)

        name = f"{original.name} (copy)"
        slug = slugify(name)
        taken = await self.db.execute(select(Template.id).where(Template.slug == slug))
        if taken.scalar_one_or_none():
            slug = f"{slug}-{uuid.uuid4().hex[:6]}"

        copy = Template(
            name=name,
            slug=slug,
            description=original.description,
            category=original.category,
            status=TemplateStatus.DRAFT.value,
            is_system=False,
            allow_save_progress=original.allow_save_progress,
            show_progress_bar=original.show_progress_bar,
            completion_message=original.completion_message,
            steps=_build_steps(original.steps),
        )
        self.db.add(copy)
        await self.db.flush()
        return WizardTemplate.model_validate(copy)
