"""Database-backed roadmap document repository."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.models import RoadmapDocumentModel
from ..roadmap import DOCUMENT_NAME, Roadmap, roadmap_document_path

logger = logging.getLogger(__name__)


def _normalize_owner(owner_id: str) -> str:
    normalized = owner_id.strip()
    if not normalized:
        raise ValueError("Owner id cannot be empty.")
    return normalized


class RoadmapRepository:
    """Stores each roadmap as one row keyed by its document path.

    The JSON payload and the denormalised progress columns are written by the
    same UPDATE so status and pointer changes land together.
    """

    def __init__(self, app_id: str) -> None:
        self._app_id = app_id

    def path_for(self, owner_id: str) -> str:
        return roadmap_document_path(self._app_id, _normalize_owner(owner_id))

    def get(self, session: Session, owner_id: str) -> Optional[Roadmap]:
        model = self._find(session, owner_id)
        if model is None:
            return None
        return Roadmap.from_document(model.payload)

    def save(self, session: Session, roadmap: Roadmap) -> Roadmap:
        owner_id = _normalize_owner(roadmap.owner_id)
        model = self._find(session, owner_id, for_update=True)
        if model is None:
            model = RoadmapDocumentModel(
                app_id=self._app_id,
                owner_id=owner_id,
                document_name=DOCUMENT_NAME,
                path=self.path_for(owner_id),
                revision=0,
            )
            session.add(model)

        model.payload = roadmap.to_document()
        model.current_period_index = roadmap.current_period_index
        model.completed_count = roadmap.completed_count
        model.last_updated = roadmap.last_updated
        model.revision = (model.revision or 0) + 1
        session.flush()
        logger.debug("Saved roadmap %s revision %s", model.path, model.revision)
        return Roadmap.from_document(model.payload)

    def delete(self, session: Session, owner_id: str) -> bool:
        stmt = delete(RoadmapDocumentModel).where(
            RoadmapDocumentModel.path == self.path_for(owner_id)
        )
        result = session.execute(stmt)
        return bool(result.rowcount)

    def _find(
        self,
        session: Session,
        owner_id: str,
        *,
        for_update: bool = False,
    ) -> Optional[RoadmapDocumentModel]:
        stmt = select(RoadmapDocumentModel).where(
            RoadmapDocumentModel.path == self.path_for(owner_id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return session.execute(stmt).scalar_one_or_none()


__all__ = ["RoadmapRepository"]
