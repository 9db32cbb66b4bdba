"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_AUTO_MIGRATE", "false")

from datetime import date
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsnexus.core.auth import create_access_token
from newsnexus.core.database import Base, build_engine
from newsnexus.database import models  # noqa: F401
from newsnexus.database.models import (
    AiArticleApproval,
    AiStateProposal,
    Article,
    ArtificialIntelligence,
    State,
    User,
)
from newsnexus.main import app


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    """Bearer header for a regular reviewer."""
    token = create_access_token({"id": 1, "email": "reviewer@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    """Bearer header for an administrator."""
    token = create_access_token({"id": 2, "email": "admin@example.com", "isAdmin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def db_engine():
    """Fresh in-memory database with the full schema."""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
async def states(db_session) -> Dict[str, int]:
    """Seed a handful of states; returns abbreviation -> id."""
    rows = [
        State(id=1, name="Ohio", abbreviation="OH"),
        State(id=2, name="California", abbreviation="CA"),
        State(id=3, name="Texas", abbreviation="TX"),
        State(id=4, name="New York", abbreviation="NY"),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return {row.abbreviation: row.id for row in rows}


@pytest.fixture
async def reviewer_id(db_session) -> int:
    user = User(username="reviewer", email="reviewer@example.com", is_admin=False)
    db_session.add(user)
    await db_session.commit()
    return user.id


@pytest.fixture
async def ai_id(db_session) -> int:
    ai = ArtificialIntelligence(name="state-assigner", description="Test classifier")
    db_session.add(ai)
    await db_session.commit()
    return ai.id


@pytest.fixture
def make_article(db_session):
    """Factory fixture: insert an article and return its id."""

    async def _make(url: str = "https://example.com/fire", title: str = "Fire recall") -> int:
        article = Article(
            url=url,
            title=title,
            description=f"{title} description",
            publication_name="Example Times",
        )
        db_session.add(article)
        await db_session.commit()
        return article.id

    return _make


@pytest.fixture
def make_proposal(db_session):
    """Factory fixture: insert an AI state proposal and return its id."""

    async def _make(article_id: int, state_id, reasoning: str = "Mentions the state") -> int:
        proposal = AiStateProposal(
            article_id=article_id,
            state_id=state_id,
            prompt_id=7,
            reasoning=reasoning,
            occurred_in_the_us=state_id is not None,
        )
        db_session.add(proposal)
        await db_session.commit()
        return proposal.id

    return _make


@pytest.fixture
def make_ai_approval(db_session):
    """Factory fixture: insert an AI-drafted report text and return its id."""

    async def _make(article_id: int, ai_id=None, is_approved: bool = True) -> int:
        draft = AiArticleApproval(
            article_id=article_id,
            artificial_intelligence_id=ai_id,
            is_approved=is_approved,
            headline_for_pdf_report="Recall after fire",
            publication_name_for_pdf_report="Example Times",
            publication_date_for_pdf_report=date(2025, 3, 1),
            text_for_pdf_report="A product was recalled after a fire.",
            url_for_pdf_report="https://example.com/fire",
            km_notes="Checked by classifier",
        )
        db_session.add(draft)
        await db_session.commit()
        return draft.id

    return _make
