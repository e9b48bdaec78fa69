from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, JSONResponse, Response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["static"])

INDEX_FILE = "index.html"


def resolve_static_file(static_dir: Path, requested: str) -> Path | None:
    """
    Map a request path onto a file inside static_dir.

    Returns the file when it exists and lies within static_dir; otherwise the
    index page if present; otherwise None.
    """
    root = static_dir.resolve()
    if requested:
        candidate = (root / requested).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return candidate
    index = root / INDEX_FILE
    return index if index.is_file() else None


# PUBLIC_INTERFACE
@router.get("/{full_path:path}", include_in_schema=False)
def serve_static(full_path: str, request: Request) -> Response:
    """
    Serve static assets, falling back to index.html for any unknown path.
    """
    static_dir = Path(request.app.state.settings.static_dir)
    target = resolve_static_file(static_dir, full_path)
    if target is None:
        logger.warning("No %s in %s", INDEX_FILE, static_dir)
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return FileResponse(target)
