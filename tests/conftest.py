"""
Pytest fixtures for StemHub tests.

Every test gets its own SQLite file so all connections in that test share
one database and nothing leaks between tests.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator

# Settings are read at import time by stemhub.database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "stemhub-test.db")
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from stemhub.config import get_settings
from stemhub.kernel.identity.identity_service import IdentityService
from stemhub.kernel.identity.jwt import JWTManager
from stemhub.kernel.models import Base, Collaborator, Project, User
from stemhub.kernel.permissions.roles import CollaboratorRole, default_permissions

get_settings.cache_clear()


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """A fresh SQLite database with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    
    @event.listens_for(engine.sync_engine, "connect")
    def _foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield engine
    
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    
    async with session_maker() as session:
        yield session
        await session.rollback()


async def make_user(session: AsyncSession, email: str, display_name: str) -> User:
    user = await IdentityService(session).create_user(email, display_name)
    await session.commit()
    return user


async def add_collaborator(
    session: AsyncSession,
    project: Project,
    user: User,
    role: CollaboratorRole = CollaboratorRole.CONTRIBUTOR,
    **flags: bool,
) -> Collaborator:
    """Insert a collaborator row directly, bypassing the invite checks."""
    permissions = default_permissions(role).as_dict()
    permissions.update(flags)
    collaborator = Collaborator(
        project_id=project.id,
        user_id=user.id,
        role=role.value if isinstance(role, CollaboratorRole) else role,
        **permissions,
    )
    session.add(collaborator)
    await session.commit()
    return collaborator


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    """Project owner."""
    return await make_user(db_session, "owner@example.com", "Olivia Owner")


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession) -> User:
    return await make_user(db_session, "alice@example.com", "Alice")


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession) -> User:
    return await make_user(db_session, "bob@example.com", "Bob")


@pytest_asyncio.fixture
async def carol(db_session: AsyncSession) -> User:
    return await make_user(db_session, "carol@example.com", "Carol")


@pytest_asyncio.fixture
async def stranger(db_session: AsyncSession) -> User:
    """A user with no relationship to any project."""
    return await make_user(db_session, "stranger@example.com", "Stranger")


@pytest_asyncio.fixture
async def project(db_session: AsyncSession, owner: User) -> Project:
    """A project owned by ``owner`` with no collaborators."""
    project = Project(id=uuid.uuid4(), name="Night Drive", owner_id=owner.id)
    db_session.add(project)
    await db_session.commit()
    return project


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key="test-secret-key-for-testing-only-0123456789",
        algorithm="HS256",
        access_token_expire_minutes=30,
    )
