from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from notes_api.db import SQLiteRepository
from notes_api.main import create_app
from notes_api.repositories import InMemoryRepository
from notes_api.settings import Settings

INDEX_HTML = "<!doctype html><title>Notes</title><p>notes index</p>"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    d = tmp_path / "public"
    d.mkdir()
    (d / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (d / "app.js").write_text("console.log('notes');", encoding="utf-8")
    return d


@pytest.fixture
def settings(tmp_path: Path, static_dir: Path) -> Settings:
    return Settings(
        persistence_backend="sqlite",
        sqlite_db_path=str(tmp_path / "data" / "notes.db"),
        static_dir=str(static_dir),
    )


@pytest.fixture
def repository(settings: Settings) -> SQLiteRepository:
    return SQLiteRepository(settings.sqlite_db_path)


@pytest.fixture
def client(settings: Settings, repository: SQLiteRepository) -> TestClient:
    return TestClient(create_app(settings, repository))


@pytest.fixture(params=["memory", "sqlite"])
def any_repository(request, tmp_path: Path):
    """Each storage backend in turn."""
    if request.param == "memory":
        return InMemoryRepository()
    return SQLiteRepository(str(tmp_path / "notes.db"))
