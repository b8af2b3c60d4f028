"""Spell model."""

from sqlalchemy import Column, Index, Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from ..database import Base
from ..core.hierarchy import ROOT_FOLDER_ID


class Spell(Base):
    """Spells table."""

    __tablename__ = "spells"
    __table_args__ = (
        Index("ix_spells_folder_id", "folder_id"),
        Index("ix_spells_name", "name"),
        Index("ix_spells_convocation", "convocation"),
    )

    # Primary key
    id = Column(String(36), primary_key=True)  # uuid4

    name = Column(String(255), nullable=False)
    convocation = Column(String(20), nullable=False)
    complexity_level = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)

    # [{"mastery_level_minimum": 41, "effects_description": "..."}]
    bonus_effects = Column(JSON, default=list)

    casting_time = Column(String(255), default='')
    range = Column(String(255), default='')
    duration = Column(String(255), default='')

    # Hierarchical placement; contents of a recursively deleted folder go with it
    folder_id = Column(
        Integer,
        ForeignKey("folders.id", ondelete="CASCADE"),
        nullable=False,
        default=ROOT_FOLDER_ID,
    )

    source_book = Column(String(255), default='')
    source_page = Column(String(50), default='')

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
