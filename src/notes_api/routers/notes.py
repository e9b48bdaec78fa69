from __future__ import annotations

import json
import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Request, status

from ..exceptions import NotFoundError, ValidationError
from ..repositories import Repository
from ..schemas import INVALID_BODY, ErrorOut, NoteIn, NoteOut, parse_note_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notes",
    tags=["notes"],
)

_NOTE_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {"schema": NoteIn.model_json_schema()},
            "application/x-www-form-urlencoded": {"schema": NoteIn.model_json_schema()},
        },
    }
}

_ERRORS = {
    400: {"model": ErrorOut, "description": "Invalid id or missing title"},
    404: {"model": ErrorOut, "description": "Note not found"},
    500: {"model": ErrorOut, "description": "Storage failure"},
}


# PUBLIC_INTERFACE
def get_repo(request: Request) -> Repository:
    """
    Dependency returning the repository the application was built with.
    """
    return request.app.state.repository


# PUBLIC_INTERFACE
async def read_payload(request: Request) -> Any:
    """
    Dependency decoding the request body for POST and PUT.

    - application/x-www-form-urlencoded: the form fields as a dict
    - JSON or no content type: the decoded JSON value
    - empty body: None
    - any other content type: the raw bytes, which NoteIn rejects

    Raises:
        ValidationError("Invalid request body") for malformed JSON.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/x-www-form-urlencoded":
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw:
        return None
    if content_type and not (content_type == "application/json" or content_type.endswith("+json")):
        return raw
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValidationError(INVALID_BODY, {"content_type": content_type}) from exc


# PUBLIC_INTERFACE
@router.get("/", response_model=List[NoteOut], include_in_schema=False)
@router.get(
    "",
    response_model=List[NoteOut],
    summary="List Notes",
    description="Return every note, most recently updated first.",
    responses={500: _ERRORS[500]},
)
def list_notes(repo: Repository = Depends(get_repo)) -> List[NoteOut]:
    return [NoteOut(**n) for n in repo.list()]


# PUBLIC_INTERFACE
@router.get(
    "/{note_id}",
    response_model=NoteOut,
    summary="Get Note",
    description="Get a single note by id.",
    responses={400: _ERRORS[400], 404: _ERRORS[404], 500: _ERRORS[500]},
)
def get_note(note_id: str, repo: Repository = Depends(get_repo)) -> NoteOut:
    nid = parse_note_id(note_id)
    item = repo.get(nid)
    if item is None:
        raise NotFoundError(nid)
    return NoteOut(**item)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=NoteOut,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
@router.post(
    "",
    response_model=NoteOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Note",
    description="Create a note from {title, body?} and return the stored record.",
    openapi_extra=_NOTE_BODY,
    responses={400: _ERRORS[400], 500: _ERRORS[500]},
)
def create_note(
    payload: Any = Depends(read_payload),
    repo: Repository = Depends(get_repo),
) -> NoteOut:
    data = NoteIn.from_payload(payload)
    created = repo.insert(data.title, data.body)
    logger.info("Created note %d", created["id"])
    return NoteOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{note_id}",
    response_model=NoteOut,
    summary="Replace Note",
    description=(
        "Replace the title and body of a note. Both fields are written; an omitted "
        "body becomes an empty string."
    ),
    openapi_extra=_NOTE_BODY,
    responses={400: _ERRORS[400], 404: _ERRORS[404], 500: _ERRORS[500]},
)
def put_note(
    note_id: str,
    payload: Any = Depends(read_payload),
    repo: Repository = Depends(get_repo),
) -> NoteOut:
    # id format, then payload, then existence
    nid = parse_note_id(note_id)
    data = NoteIn.from_payload(payload)
    if not repo.update(nid, data.title, data.body):
        raise NotFoundError(nid)
    updated = repo.get(nid)
    if updated is None:
        # Deleted by a concurrent request after the update
        raise NotFoundError(nid)
    return NoteOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Note",
    description="Delete a note by id. Returns 204 on success, 404 if not found.",
    responses={400: _ERRORS[400], 404: _ERRORS[404], 500: _ERRORS[500]},
)
def delete_note(note_id: str, repo: Repository = Depends(get_repo)) -> None:
    nid = parse_note_id(note_id)
    if not repo.delete(nid):
        raise NotFoundError(nid)
    logger.info("Deleted note %d", nid)
    return None
