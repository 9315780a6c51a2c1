"""
Pytest configuration and fixtures for all tests
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings, allowed_upload_exts
from app.db.init_db import create_tables
from app.db.session import build_engine, build_session_factory
from app.main import create_app
from app.services.repository import MemoryContentStore, SqlContentStore
from app.services.storage import AttachmentStorage

CHILDREN = "어린이용"
WORKSHEET = "활동지"
EASY = "쉬움"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        STORAGE_BACKEND="memory",
        DATABASE_URL="",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def sql_store(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'content.db'}")
    create_tables(engine)
    yield SqlContentStore(build_session_factory(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "database"])
def store(request):
    """Every test using this fixture runs once per store implementation."""
    if request.param == "memory":
        return MemoryContentStore()
    return request.getfixturevalue("sql_store")


@pytest.fixture
def attachments(settings):
    storage = AttachmentStorage(
        settings.UPLOAD_DIR,
        max_bytes=10 * 1024 * 1024,
        allowed_exts=allowed_upload_exts(settings),
    )
    storage.ensure_dir()
    return storage


@pytest.fixture
def client(settings, store, attachments):
    app = create_app(settings=settings, store=store, attachments=attachments)
    return TestClient(app)


@pytest.fixture
def resource_payload():
    """Factory for a valid learning resource create body (camelCase, as sent by the site)."""

    def _make(**overrides):
        payload = {
            "title": "숫자 놀이 활동지",
            "description": "1-10까지 숫자를 게임으로 배워보는 활동지",
            "fileName": "numbers.pdf",
            "fileSize": 2048,
            "fileType": "application/pdf",
            "category": CHILDREN,
            "resourceType": WORKSHEET,
            "difficulty": EASY,
            "ageGroup": "5-7세",
        }
        payload.update(overrides)
        return payload

    return _make

