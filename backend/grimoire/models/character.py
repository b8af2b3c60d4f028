"""Character model and the character <-> spell association."""

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


character_spells = Table(
    "character_spells",
    Base.metadata,
    Column("character_id", String(36), ForeignKey("characters.id", ondelete="CASCADE"), primary_key=True),
    Column("spell_id", String(36), ForeignKey("spells.id", ondelete="CASCADE"), primary_key=True),
)


class Character(Base):
    """Characters table."""

    __tablename__ = "characters"

    id = Column(String(36), primary_key=True)  # uuid4
    name = Column(String(255), nullable=False)

    # List of convocation names, e.g. ["Lyahvi", "Peleahn"]
    convocations = Column(JSON, nullable=False, default=list)

    rank = Column(String(20), nullable=False)
    game = Column(String(255), default='')

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    spells = relationship("Spell", secondary=character_spells, lazy="selectin", passive_deletes=True)

    @property
    def known_spell_ids(self) -> list[str]:
        return [spell.id for spell in self.spells]
