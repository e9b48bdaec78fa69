from __future__ import annotations

from typing import Any, Dict, Optional


# PUBLIC_INTERFACE
class NotesError(Exception):
    """
    Base class for application errors.

    Attributes:
    - message: caller-safe description, returned in the response body
    - context: internal details for logs only, never sent to the client
    """

    status_code: int = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)


# PUBLIC_INTERFACE
class ValidationError(NotesError):
    """Client input is malformed (bad id, missing title). Maps to 400."""

    status_code = 400


# PUBLIC_INTERFACE
class NotFoundError(NotesError):
    """No note matches the requested id. Maps to 404."""

    status_code = 404

    def __init__(self, note_id: Optional[int] = None) -> None:
        context = {"note_id": note_id} if note_id is not None else None
        super().__init__("Note not found", context)


# PUBLIC_INTERFACE
class StorageError(NotesError):
    """The persistence layer failed unexpectedly. Maps to 500."""

    status_code = 500
