"""Fixed vocabularies shared by models, schemas and services."""

from enum import Enum


class Convocation(str, Enum):
    """Magic schools; NEUTRAL spells can be learned by anyone."""

    LYAHVI = "Lyahvi"
    PELEAHN = "Peleahn"
    JMORVI = "Jmorvi"
    FYVRIA = "Fyvria"
    ODIVSHE = "Odivshe"
    SAVORYA = "Savorya"
    NEUTRAL = "Neutral"


class CharacterRank(str, Enum):
    MAVARI = "Mavari"
    SATIA_MAVARI = "Satia-Mavari"
    SHENEVA = "Sheneva"
    VIRAN = "Viran"


class DeleteStrategy(str, Enum):
    """How a folder's contents are handled when the folder is deleted."""

    EMPTY_ONLY = "empty-only"
    MOVE_TO_PARENT = "move-to-parent"
    RECURSIVE = "recursive"
