"""Base repository with shared get-by-ID and transaction patterns.

Eliminates duplicated __init__, get_by_id, and get_by_id_optional logic
across repositories.  Subclasses specify model_class, id_column, and
not_found_error; the base provides the common implementations.

``_atomic()`` wraps multi-step writes: one commit at the end, rollback
on any exception.
"""

from contextlib import contextmanager
from typing import Any, Iterator, TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import GrimoireException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Folder)
        id_column:       Name of the primary-key column (default "id")
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    id_column: str = "id"
    not_found_error: Type[GrimoireException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        """Base query for get_by_id / get_by_id_optional."""
        return self.db.query(self.model_class)

    def get_by_id(self, entity_id: Any) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: Any) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        return self._base_query().filter(col == entity_id).first()

    def exists(self, entity_id: Any) -> bool:
        col = getattr(self.model_class, self.id_column)
        return self.db.query(col).filter(col == entity_id).first() is not None

    def count(self) -> int:
        return self.db.query(self.model_class).count()

    @contextmanager
    def _atomic(self) -> Iterator[Session]:
        """Run a block of writes as one transaction."""
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
