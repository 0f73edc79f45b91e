"""
Pytest configuration and shared fixtures for all tests.

Environment defaults are set before the application modules are imported so
the module-level settings never touch a developer's real database or keys.
"""

import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "resume_insight_test.db"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "resume_insight_uploads"))
os.environ.setdefault("GEMINI_API_KEY", "test-api-key-for-testing")

import fitz  # PyMuPDF
import httpx
import pytest
from google.genai import types
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from resume_insight.config import Settings
from resume_insight.database import Base
from resume_insight.models import Resume


# ============================================================================
# PDFs
# ============================================================================

def build_pdf(*pages_text: str) -> bytes:
    """Build a real PDF with one page per argument (empty string = blank page)."""
    doc = fitz.open()
    for text in pages_text or ("",):
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def resume_pdf() -> bytes:
    return build_pdf("John Doe\nBackend Engineer\n5 years backend experience with Python and Go")


# ============================================================================
# Settings and HTTP
# ============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        supabase_url="",
        supabase_service_role_key="",
        upload_dir=str(tmp_path / "uploads"),
        storage_upload_attempts=2,
    )


def gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeGenaiClient:
    """
    Stands in for genai.Client: exposes client.aio.models.generate_content.

    Records every prompt, raises `error` when set, otherwise answers with
    `response` (a generateContent JSON dict) parsed into the SDK response type.
    """

    def __init__(self, text: str = "Backend engineer with 5 years of Python. Hire"):
        self.calls = []
        self.response = gemini_response(text)
        self.error = None
        self.aio = self
        self.models = self

    @property
    def prompts(self):
        return [call["contents"] for call in self.calls]

    async def generate_content(self, *, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return types.GenerateContentResponse.model_validate(self.response)


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db_path(tmp_path):
    """Temporary SQLite file with the schema created through a plain sync engine."""
    path = tmp_path / "test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
def session_factory(db_path):
    """
    Async sessions on the temporary database.

    NullPool gives every session a fresh connection, so the same factory works
    from pytest-asyncio tests and from TestClient's own event loop.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def sync_session(db_path):
    """Sync sessions for seeding and inspecting rows from non-async tests."""
    engine = create_engine(f"sqlite:///{db_path}")
    yield sessionmaker(engine, expire_on_commit=False)
    engine.dispose()


def seed_resume(sync_session, **fields) -> Resume:
    with sync_session() as db:
        resume = Resume(**fields)
        db.add(resume)
        db.commit()
        db.refresh(resume)
        return resume


def load_resume(sync_session, resume_id: str):
    with sync_session() as db:
        return db.get(Resume, resume_id)
