from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class NoteEntity(TypedDict):
    """
    A note as held by the storage backends.

    Fields:
    - id: Unique positive integer identifier, assigned on insert
    - title: Non-empty, trimmed title
    - body: Free text, empty string when not supplied
    - created_at: ISO8601 UTC timestamp set on insert
    - updated_at: ISO8601 UTC timestamp refreshed on every update
    """

    id: int
    title: str
    body: str
    created_at: str
    updated_at: str
