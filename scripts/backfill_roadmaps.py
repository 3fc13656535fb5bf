"""Copy roadmaps from the legacy JSON store into the database store."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from leaderreps.config import get_settings
from leaderreps.db.session import create_schema, session_scope
from leaderreps.repositories.roadmaps import RoadmapRepository
from leaderreps.roadmap import Roadmap

logger = logging.getLogger("leaderreps.backfill")


def backfill_roadmaps(path: Path, *, app_id: str) -> int:
    if not path.exists():
        logger.info("No legacy roadmaps found at %s", path)
        return 0
    with path.open(encoding="utf-8") as handle:
        documents = json.load(handle)

    repo = RoadmapRepository(app_id)
    imported = 0
    with session_scope() as session:
        for key, document in documents.items():
            try:
                roadmap = Roadmap.from_document(document)
            except ValidationError as exc:
                logger.warning("Skipping invalid roadmap %s: %s", key, exc)
                continue
            repo.save(session, roadmap)
            imported += 1
    logger.info("Imported %d roadmaps", imported)
    return imported


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--source",
        type=Path,
        default=settings.legacy_store_path,
        required=settings.legacy_store_path is None,
        help="Legacy roadmaps.json file (defaults to LEADERREPS_LEGACY_STORE_PATH).",
    )
    parser.add_argument("--create-schema", action="store_true", help="Create tables before importing.")
    args = parser.parse_args(argv)

    if args.create_schema:
        create_schema()
    backfill_roadmaps(args.source, app_id=settings.app_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
