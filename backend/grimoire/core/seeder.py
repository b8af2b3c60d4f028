"""Seed the root folder on startup.

The folder hierarchy needs exactly one folder without a parent, at the
reserved id ``ROOT_FOLDER_ID``. Idempotent: nothing happens if it exists.
"""

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from .hierarchy import ROOT_FOLDER_ID, ROOT_FOLDER_NAME

logger = logging.getLogger(__name__)


def seed_root_folder(db: Session) -> bool:
    """Insert the root folder if missing.

    Args:
        db: An open SQLAlchemy session.

    Returns:
        True if the root was created, False if it already existed.
    """
    from ..models import Folder

    if db.query(Folder.id).filter(Folder.id == ROOT_FOLDER_ID).first() is not None:
        logger.debug("Root folder present, skipping seed")
        return False

    db.add(Folder(id=ROOT_FOLDER_ID, name=ROOT_FOLDER_NAME, parent_id=None))
    db.flush()

    # An explicit id does not advance the PostgreSQL sequence.
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text(
            "SELECT setval(pg_get_serial_sequence('folders', 'id'), "
            "(SELECT MAX(id) FROM folders))"
        ))

    db.commit()
    logger.info("Seeded root folder", extra={"folder_id": ROOT_FOLDER_ID})
    return True
