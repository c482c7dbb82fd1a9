"""One respondent's run through a wizard template.

A last-write-wins document keyed by id: `current_step` and `answers` are
replaced wholesale on every progress save. COMPLETED is terminal.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from stepform.database import Base


class WizardSubmission(Base):
    __tablename__ = "wizard_submissions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("wizard_templates.id"), nullable=False, index=True
    )
    # IN_PROGRESS | COMPLETED
    status: Mapped[str] = mapped_column(String(20), default="IN_PROGRESS", index=True)
    # Index into the VISIBLE steps at the last save
    current_step: Mapped[int] = mapped_column(Integer, default=0)
    answers: Mapped[dict] = mapped_column(JSON, default=dict)

    submitter_name: Mapped[str | None] = mapped_column(String(200))
    submitter_email: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
