"""initial schema

Revision ID: 3f1c2a9d7b40
Revises:
Create Date: 2026-10-17 09:12:44.118302
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "3f1c2a9d7b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

FIELD_TYPES = (
    "checkboxes", "date", "datetime", "dropdown", "email", "file",
    "multipleChoice", "name", "number", "paragraph", "password", "phone",
    "richText", "singleLine", "time", "url",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(64), nullable=True, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role_id", sa.Uuid(), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("user_id", "role_id", name="uq_user_role"),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("color", sa.String(7), nullable=False, server_default="#6c757d"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "forms",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("title_key", sa.String(255), nullable=False),
        sa.Column("category", sa.String(32), nullable=False, server_default="survey"),
        sa.Column("category_id", sa.String(64), sa.ForeignKey("categories.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("current_version_number", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_published_version_id", sa.String(40), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("title_key", name="uq_forms_title_key"),
    )

    op.create_table(
        "form_fields",
        sa.Column("id", sa.String(40), primary_key=True),
        sa.Column("form_id", sa.String(64), sa.ForeignKey("forms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("placeholder", sa.String(255), nullable=False, server_default=""),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("do_not_store", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("options", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("form_id", "name", name="uq_form_fields_form_id_name"),
        sa.CheckConstraint(
            "type IN (" + ",".join(f"'{t}'" for t in FIELD_TYPES) + ")",
            name="ck_form_fields_type",
        ),
    )
    op.create_index("ix_form_fields_form_id", "form_fields", ["form_id"])

    op.create_table(
        "form_versions",
        sa.Column("id", sa.String(40), primary_key=True),
        sa.Column("form_id", sa.String(64), sa.ForeignKey("forms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("category_id", sa.String(64), nullable=True),
        sa.Column("fields_data", JSONType, nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("change_description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("form_id", "version_number", name="uq_form_versions_form_number"),
    )
    op.create_index("ix_form_versions_form_published", "form_versions", ["form_id", "is_published"])

    op.create_table(
        "form_drafts",
        sa.Column("id", sa.String(40), primary_key=True),
        sa.Column("form_id", sa.String(64), sa.ForeignKey("forms.id", ondelete="CASCADE"), nullable=True),
        sa.Column("draft_key", sa.String(120), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("category_id", sa.String(64), nullable=True),
        sa.Column("fields_data", JSONType, nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("last_saved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_auto_save", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("draft_key", name="uq_form_drafts_draft_key"),
    )
    op.create_index("ix_form_drafts_form_author", "form_drafts", ["form_id", "created_by"])
    op.create_index("ix_form_drafts_author_saved", "form_drafts", ["created_by", "last_saved_at"])
    op.create_index("ix_form_drafts_last_saved", "form_drafts", ["last_saved_at"])

    op.create_table(
        "templates",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_key", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category_id", sa.String(64), sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("fields", JSONType, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("name_key", name="uq_templates_name_key"),
    )

    op.create_table(
        "form_submissions",
        sa.Column("id", sa.String(40), primary_key=True),
        sa.Column("form_id", sa.String(64), sa.ForeignKey("forms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("payload", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_form_submissions_form_id", "form_submissions", ["form_id"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor_user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("event_metadata", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_events_entity_id", "audit_events", ["entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_entity_id", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_index("ix_form_submissions_form_id", table_name="form_submissions")
    op.drop_table("form_submissions")
    op.drop_table("templates")
    op.drop_index("ix_form_drafts_last_saved", table_name="form_drafts")
    op.drop_index("ix_form_drafts_author_saved", table_name="form_drafts")
    op.drop_index("ix_form_drafts_form_author", table_name="form_drafts")
    op.drop_table("form_drafts")
    op.drop_index("ix_form_versions_form_published", table_name="form_versions")
    op.drop_table("form_versions")
    op.drop_index("ix_form_fields_form_id", table_name="form_fields")
    op.drop_table("form_fields")
    op.drop_table("forms")
    op.drop_table("categories")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
