import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("EMAIL_NOTIFICATIONS_ENABLED", "true")

from datetime import datetime
from typing import List, Optional
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from journal_api.db.database import Base
from journal_api.models import Language, LanguageLevel, Post, User, UserLanguage
from journal_api.services.email_backend import EmailBackend


class FakeEmailBackend(EmailBackend):
    """Records queued email ids; fails the calls whose index is in fail_on."""

    def __init__(self, fail_on=()):
        self.queued: List[UUID] = []
        self.calls = 0
        self.fail_on = set(fail_on)

    async def enqueue(self, email_notification_id: UUID) -> None:
        index = self.calls
        self.calls += 1
        if index in self.fail_on:
            raise ConnectionError("redis unavailable")
        self.queued.append(email_notification_id)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def email_backend():
    return FakeEmailBackend()


# ============================================================
# Factories
# ============================================================

async def make_user(db: AsyncSession, handle: str, name: Optional[str] = None) -> User:
    user = User(email=f"{handle}@example.com", handle=handle, name=name)
    db.add(user)
    await db.commit()
    return user


async def make_language(db: AsyncSession, code: str = "es", name: str = "Spanish") -> Language:
    language = Language(code=code, name=name)
    db.add(language)
    await db.commit()
    return language


async def declare_level(db: AsyncSession, user: User, language: Language, level: LanguageLevel) -> None:
    db.add(UserLanguage(user_id=user.id, language_id=language.id, level=level))
    await db.commit()


async def make_post(
    db: AsyncSession,
    author: User,
    language: Language,
    title: str = "Mi primer día",
    created_at: Optional[datetime] = None,
) -> Post:
    post = Post(author_id=author.id, language_id=language.id, title=title, body="Hoy fui al mercado.")
    if created_at is not None:
        post.created_at = created_at
    db.add(post)
    await db.commit()
    return post


@pytest_asyncio.fixture
async def language(db):
    return await make_language(db)


@pytest_asyncio.fixture
async def alice(db):
    return await make_user(db, "alice", "Alice")


@pytest_asyncio.fixture
async def bob(db):
    return await make_user(db, "bob")


@pytest_asyncio.fixture
async def carol(db):
    return await make_user(db, "carol", "Carol")


@pytest_asyncio.fixture
async def bobs_post(db, bob, language):
    return await make_post(db, bob, language)
