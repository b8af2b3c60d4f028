"""Folder model: the spell hierarchy."""

from sqlalchemy import Column, Index, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from ..database import Base


class Folder(Base):
    """A node in the folder tree.

    Exactly one row (the root, id 1) has parent_id NULL. Sibling names are
    unique per parent.
    """

    __tablename__ = "folders"
    __table_args__ = (
        UniqueConstraint("parent_id", "name", name="uq_folders_parent_name"),
        Index("ix_folders_parent_id", "parent_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey("folders.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
