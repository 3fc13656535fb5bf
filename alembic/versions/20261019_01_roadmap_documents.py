"""Roadmap document table."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_01_roadmap_documents"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "roadmap_documents",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("app_id", sa.String(length=128), nullable=False),
        sa.Column("owner_id", sa.String(length=128), nullable=False),
        sa.Column("document_name", sa.String(length=64), nullable=False, server_default="roadmap"),
        sa.Column("path", sa.String(length=512), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("current_period_index", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("completed_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("revision", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.UniqueConstraint("app_id", "owner_id", "document_name", name="uq_roadmap_document_path"),
        sa.UniqueConstraint("path", name="uq_roadmap_documents_path"),
    )
    op.create_index("ix_roadmap_documents_owner", "roadmap_documents", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_roadmap_documents_owner", table_name="roadmap_documents")
    op.drop_table("roadmap_documents")
