"""Wizard template tables: templates, their steps, and step fields.

Conditions, options and validation rules are JSON documents; their shape
is defined by the pydantic schemas in `stepform.schemas.wizard`.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stepform.database import Base


class Template(Base):
    __tablename__ = "wizard_templates"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(220), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(50), default="general")
    # DRAFT | PUBLISHED | ARCHIVED
    status: Mapped[str] = mapped_column(String(20), default="DRAFT", index=True)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False)

    allow_save_progress: Mapped[bool] = mapped_column(Boolean, default=True)
    show_progress_bar: Mapped[bool] = mapped_column(Boolean, default=True)
    completion_message: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    steps: Mapped[list["TemplateStep"]] = relationship(
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateStep.sort_order",
    )


class TemplateStep(Base):
    __tablename__ = "wizard_steps"
    __table_args__ = (UniqueConstraint("template_id", "sort_order"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("wizard_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    condition: Mapped[dict | None] = mapped_column(JSON, default=None)

    template: Mapped["Template"] = relationship(back_populates="steps")
    fields: Mapped[list["TemplateField"]] = relationship(
        back_populates="step",
        cascade="all, delete-orphan",
        order_by="TemplateField.sort_order",
    )


class TemplateField(Base):
    __tablename__ = "wizard_fields"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    step_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("wizard_steps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    # Answer key, unique across the whole template (enforced on publish)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="TEXT")
    placeholder: Mapped[str | None] = mapped_column(String(255))
    help_text: Mapped[str | None] = mapped_column(Text)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    options: Mapped[list | None] = mapped_column(JSON, default=None)
    validation: Mapped[dict | None] = mapped_column(JSON, default=None)
    default_value: Mapped[str | None] = mapped_column(Text)
    condition: Mapped[dict | None] = mapped_column(JSON, default=None)
    external_mapping: Mapped[str | None] = mapped_column(String(100))

    step: Mapped["TemplateStep"] = relationship(back_populates="fields")
