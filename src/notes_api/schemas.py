from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError

# SQLite INTEGER PRIMARY KEY is a signed 64-bit value
MAX_NOTE_ID = 2**63 - 1

_NOTE_ID_RE = re.compile(r"^\+?([0-9]+)(?:\.0*)?$")

TITLE_REQUIRED = "Title is required"
INVALID_ID = "Invalid id"
INVALID_BODY = "Invalid request body"


# PUBLIC_INTERFACE
def parse_note_id(raw: str) -> int:
    """
    Parse a path segment into a note id.

    Accepts ASCII decimal digits with an optional leading '+' and an optional
    all-zero fraction ("3", "+3", "3.0"). The value must lie in 1..MAX_NOTE_ID.

    Raises:
        ValidationError("Invalid id") for anything else.
    """
    match = _NOTE_ID_RE.match(raw or "")
    if match is None:
        raise ValidationError(INVALID_ID, {"raw_id": raw})
    note_id = int(match.group(1))
    if not (1 <= note_id <= MAX_NOTE_ID):
        raise ValidationError(INVALID_ID, {"raw_id": raw})
    return note_id


# PUBLIC_INTERFACE
def normalize_title(value: Any) -> str:
    """Return the trimmed title, raising ValueError unless it is non-blank text."""
    if not isinstance(value, str):
        raise ValueError("title must be a string")
    s = value.strip()
    if not s:
        raise ValueError("title must not be blank")
    return s


def _coerce_body(value: Any) -> str:
    """
    Turn any JSON value into body text.
    - None (or absent), false, 0 and "" become ""
    - other strings are kept verbatim
    - true, non-zero numbers, arrays and objects become their JSON text

    Falsy values collapse to "" so a body of 0 or false reads as no body,
    the same as an omitted one.
    """
    if value is None or (isinstance(value, (int, float)) and not value):
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


# PUBLIC_INTERFACE
class NoteIn(BaseModel):
    """
    Payload accepted by POST and PUT.

    Both fields are always written: PUT replaces the whole note, so an omitted
    body resets it to "".
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Shopping list",
                "body": "Milk, eggs, bread",
            }
        }
    )

    title: str = Field(..., description="Note title; surrounding whitespace is trimmed")
    body: str = Field(default="", description="Note text; defaults to an empty string")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        return normalize_title(v)

    @field_validator("body", mode="before")
    @classmethod
    def coerce_body(cls, v: Any) -> str:
        return _coerce_body(v)

    @classmethod
    def from_payload(cls, payload: Any) -> "NoteIn":
        """
        Validate a decoded request body (JSON value or form fields).

        Raises:
            ValidationError("Title is required") if the payload is not an object
            or its title is missing, not a string, or blank.
        """
        if not isinstance(payload, dict):
            raise ValidationError(TITLE_REQUIRED, {"payload_type": type(payload).__name__})
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(TITLE_REQUIRED, {"errors": exc.errors(include_url=False)}) from exc


# PUBLIC_INTERFACE
class NoteOut(BaseModel):
    """
    Schema returned by the API for a note.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Shopping list",
                "body": "Milk, eggs, bread",
                "created_at": "2026-10-19T09:15:02.123456+00:00",
                "updated_at": "2026-10-19T09:15:02.123456+00:00",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the note")
    title: str = Field(..., description="Note title")
    body: str = Field(..., description="Note text")
    created_at: str = Field(..., description="Creation timestamp (ISO8601, UTC)")
    updated_at: str = Field(..., description="Last update timestamp (ISO8601, UTC)")


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Body of every error response."""

    error: str = Field(..., description="Human readable error message")
