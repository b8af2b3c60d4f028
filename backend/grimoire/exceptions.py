"""Custom exception hierarchy for the Grimoire backend."""

from enum import Enum
from typing import Optional, Dict, Any, List


class ErrorKind(str, Enum):
    """Coarse error taxonomy shared by every domain failure."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Folder errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    FOLDER_NAME_CONFLICT = "FOLDER_NAME_CONFLICT"
    ROOT_FOLDER_IMMUTABLE = "ROOT_FOLDER_IMMUTABLE"
    FOLDER_CYCLE = "FOLDER_CYCLE"
    FOLDER_NOT_EMPTY = "FOLDER_NOT_EMPTY"
    INVALID_DELETE_STRATEGY = "INVALID_DELETE_STRATEGY"

    # Spell errors
    SPELL_NOT_FOUND = "SPELL_NOT_FOUND"

    # Character errors
    CHARACTER_NOT_FOUND = "CHARACTER_NOT_FOUND"
    CHARACTER_SPELL_NOT_FOUND = "CHARACTER_SPELL_NOT_FOUND"
    SPELL_ALREADY_KNOWN = "SPELL_ALREADY_KNOWN"
    CONVOCATION_NOT_ELIGIBLE = "CONVOCATION_NOT_ELIGIBLE"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Generic errors
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_KIND_BY_STATUS = {
    400: ErrorKind.VALIDATION,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}


class GrimoireException(Exception):
    """
    Base exception for all Grimoire errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - Error kind (validation / not_found / conflict)
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    @property
    def kind(self) -> ErrorKind:
        return _KIND_BY_STATUS.get(self.status_code, ErrorKind.INTERNAL)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, kind, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details
        }


# ---------------------------------------------------------------------------
# Validation (400)
# ---------------------------------------------------------------------------

class ValidationError(GrimoireException):
    """Malformed input or an illegal structural operation."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if field:
            merged["field"] = field
        super().__init__(
            message,
            error_code,
            status_code=400,
            details=merged
        )


class RootFolderImmutableError(ValidationError):
    """The root folder cannot be renamed, moved or deleted."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation} root folder",
            error_code=ErrorCode.ROOT_FOLDER_IMMUTABLE,
            details={"operation": operation},
        )


class FolderCycleError(ValidationError):
    """Moving a folder under itself or one of its descendants."""

    def __init__(self, folder_id: int, new_parent_id: int):
        super().__init__(
            "Cannot move folder into itself or its descendant",
            error_code=ErrorCode.FOLDER_CYCLE,
            details={"folder_id": folder_id, "new_parent_id": new_parent_id},
        )


class FolderNotEmptyError(ValidationError):
    """empty-only deletion of a folder that still has contents."""

    def __init__(self, folder_id: int):
        super().__init__(
            "Cannot delete non-empty folder",
            error_code=ErrorCode.FOLDER_NOT_EMPTY,
            details={"folder_id": folder_id},
        )


class InvalidDeleteStrategyError(ValidationError):
    """Unknown folder deletion strategy."""

    def __init__(self, strategy: Any, allowed: List[str]):
        super().__init__(
            f"Invalid deletion strategy: {strategy}",
            field="strategy",
            error_code=ErrorCode.INVALID_DELETE_STRATEGY,
            details={"strategy": str(strategy), "allowed": allowed},
        )


class ConvocationNotEligibleError(ValidationError):
    """Character cannot learn a spell from this convocation."""

    def __init__(self, character_id: str, spell_id: str, convocation: str, character_convocations: List[str]):
        super().__init__(
            f"Character cannot learn spells from the {convocation} convocation. "
            f"Character convocations: {', '.join(character_convocations)}",
            error_code=ErrorCode.CONVOCATION_NOT_ELIGIBLE,
            details={
                "character_id": character_id,
                "spell_id": spell_id,
                "spell_convocation": convocation,
                "character_convocations": list(character_convocations),
            },
        )


# ---------------------------------------------------------------------------
# Not found (404)
# ---------------------------------------------------------------------------

class NotFoundError(GrimoireException):
    """Referenced entity or relation does not exist."""

    def __init__(self, message: str, error_code: ErrorCode, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            error_code,
            status_code=404,
            details=details
        )


class FolderNotFoundError(NotFoundError):
    """Folder not found in database."""

    def __init__(self, folder_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            details={"folder_id": folder_id}
        )


class SpellNotFoundError(NotFoundError):
    """Spell not found in database."""

    def __init__(self, spell_id: str):
        super().__init__(
            f"Spell not found: {spell_id}",
            ErrorCode.SPELL_NOT_FOUND,
            details={"spell_id": spell_id}
        )


class CharacterNotFoundError(NotFoundError):
    """Character not found in database."""

    def __init__(self, character_id: str):
        super().__init__(
            f"Character not found: {character_id}",
            ErrorCode.CHARACTER_NOT_FOUND,
            details={"character_id": character_id}
        )


class CharacterSpellNotFoundError(NotFoundError):
    """The character does not know the spell being removed."""

    def __init__(self, character_id: str, spell_id: str):
        super().__init__(
            "Character does not know this spell",
            ErrorCode.CHARACTER_SPELL_NOT_FOUND,
            details={"character_id": character_id, "spell_id": spell_id}
        )


# ---------------------------------------------------------------------------
# Conflict (409)
# ---------------------------------------------------------------------------

class ConflictError(GrimoireException):
    """Operation conflicts with existing state."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFLICT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            error_code,
            status_code=409,
            details=details
        )


class FolderNameConflictError(ConflictError):
    """A sibling folder already uses this name."""

    def __init__(self, name: str, parent_id: int, message: Optional[str] = None):
        super().__init__(
            message or "A folder with this name already exists in the parent folder",
            ErrorCode.FOLDER_NAME_CONFLICT,
            details={"name": name, "parent_id": parent_id}
        )


class SpellAlreadyKnownError(ConflictError):
    """The character already knows the spell."""

    def __init__(self, character_id: str, spell_id: str):
        super().__init__(
            "Character already knows this spell",
            ErrorCode.SPELL_ALREADY_KNOWN,
            details={"character_id": character_id, "spell_id": spell_id}
        )
