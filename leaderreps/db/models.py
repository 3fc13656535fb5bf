"""ORM models backing the roadmap document store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON


class RoadmapDocumentModel(TimestampMixin, Base):
    """One roadmap document per (tenant, owner); the payload is the full aggregate."""

    __tablename__ = "roadmap_documents"
    __table_args__ = (
        UniqueConstraint("app_id", "owner_id", "document_name", name="uq_roadmap_document_path"),
        Index("ix_roadmap_documents_owner", "owner_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    app_id: Mapped[str] = mapped_column(String(128), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    document_name: Mapped[str] = mapped_column(String(64), nullable=False, default="roadmap")
    path: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    current_period_index: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    completed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


__all__ = ["JSONType", "RoadmapDocumentModel"]
