"""Wizard templates, steps, fields and submissions.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "wizard_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(220), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(50), server_default="general"),
        sa.Column("status", sa.String(20), server_default="DRAFT"),
        sa.Column("is_system", sa.Boolean(), server_default="false"),
        sa.Column("allow_save_progress", sa.Boolean(), server_default="true"),
        sa.Column("show_progress_bar", sa.Boolean(), server_default="true"),
        sa.Column("completion_message", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_wizard_templates_slug", "wizard_templates", ["slug"], unique=True)
    op.create_index("ix_wizard_templates_status", "wizard_templates", ["status"])

    op.create_table(
        "wizard_steps",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "template_id", sa.String(36),
            sa.ForeignKey("wizard_templates.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("sort_order", sa.Integer(), server_default="0"),
        sa.Column("condition", sa.JSON(), nullable=True),
        sa.UniqueConstraint("template_id", "sort_order"),
    )
    op.create_index("ix_wizard_steps_template_id", "wizard_steps", ["template_id"])

    op.create_table(
        "wizard_fields",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "step_id", sa.String(36),
            sa.ForeignKey("wizard_steps.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), server_default="TEXT"),
        sa.Column("placeholder", sa.String(255)),
        sa.Column("help_text", sa.Text()),
        sa.Column("is_required", sa.Boolean(), server_default="false"),
        sa.Column("sort_order", sa.Integer(), server_default="0"),
        sa.Column("options", sa.JSON(), nullable=True),
        sa.Column("validation", sa.JSON(), nullable=True),
        sa.Column("default_value", sa.Text()),
        sa.Column("condition", sa.JSON(), nullable=True),
        sa.Column("external_mapping", sa.String(100)),
    )
    op.create_index("ix_wizard_fields_step_id", "wizard_fields", ["step_id"])

    op.create_table(
        "wizard_submissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "template_id", sa.String(36),
            sa.ForeignKey("wizard_templates.id"), nullable=False,
        ),
        sa.Column("status", sa.String(20), server_default="IN_PROGRESS"),
        sa.Column("current_step", sa.Integer(), server_default="0"),
        sa.Column("answers", sa.JSON(), server_default="{}"),
        sa.Column("submitter_name", sa.String(200)),
        sa.Column("submitter_email", sa.String(255)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_wizard_submissions_template_id", "wizard_submissions", ["template_id"])
    op.create_index("ix_wizard_submissions_status", "wizard_submissions", ["status"])


def downgrade() -> None:
    op.drop_table("wizard_submissions")
    op.drop_table("wizard_fields")
    op.drop_table("wizard_steps")
    op.drop_table("wizard_templates")
