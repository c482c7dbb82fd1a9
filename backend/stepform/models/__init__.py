"""Aggregate model imports for Alembic auto-detection."""

from stepform.models.template import Template, TemplateField, TemplateStep  # noqa: F401
from stepform.models.submission import WizardSubmission  # noqa: F401

__all__ = ["Template", "TemplateStep", "TemplateField", "WizardSubmission"]
