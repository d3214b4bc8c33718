"""Pytest configuration for all tests."""

from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from contentbase.core.logging import get_logger
from contentbase.domain.entities import Collection, Field, Project, UserCan
from contentbase.infrastructure.persistence import models  # noqa: F401 - registers tables
from contentbase.infrastructure.persistence.database import Base

logger = get_logger(__name__)


def make_field(id: int, name: str, type: str, **kwargs: Any) -> Field:
    """Build a field with the label defaulting to the capitalized name."""
    kwargs.setdefault("label", name.replace("_", " ").title())
    return Field(id=id, name=name, type=type, **kwargs)


@pytest.fixture
def project() -> Project:
    return Project(id=1, name="Website", default_locale="en", locales=["en", "fr", "de"])


@pytest.fixture
def blog_collection() -> Collection:
    """A post collection covering the common field shapes."""
    return Collection(
        id=10,
        project_id=1,
        name="Posts",
        slug="posts",
        fields=[
            make_field(1, "title", "text", order=1, validations={"required": {"status": True}}),
            make_field(2, "slug", "slug", order=2, options={"slug": {"field": "title"}}),
            make_field(3, "cover", "media", order=3),
            make_field(4, "tags", "text", order=4, options={"repeatable": True}),
            make_field(5, "address", "group", order=5),
            make_field(6, "street", "text", order=1, parent_field_id=5),
            make_field(7, "photo", "media", order=2, parent_field_id=5),
            make_field(8, "secret", "password", order=6),
            make_field(9, "related", "relation", order=7, options={"relation": {"collection": 10, "type": 2}}),
        ],
    )


@pytest.fixture
def can_all() -> UserCan:
    return UserCan.all()


class RecordingNotifier:
    """Notifier that keeps every notification for assertions."""

    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class RecordingNavigator:
    """Navigator that records routes instead of following them."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def to_listing(self, project_id: int, collection_id: int) -> None:
        self.calls.append(("listing", project_id, collection_id))

    def to_edit(self, project_id: int, collection_id: int, entry_id: int) -> None:
        self.calls.append(("edit", project_id, collection_id, entry_id))

    def to_create(self, project_id: int, collection_id: int, locale: str | None = None) -> None:
        self.calls.append(("create", project_id, collection_id, locale))

    def scroll_to_top(self) -> None:
        self.calls.append(("top",))


class StaticConfirmer:
    """Confirmer returning a fixed answer and recording the prompts."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.prompts: list[str] = []

    async def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def confirmer() -> StaticConfirmer:
    return StaticConfirmer()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    from contentbase.infrastructure.api.app import app
    from contentbase.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def post_schema(db_session: AsyncSession) -> tuple[Project, Collection]:
    """A stored project with a post collection covering the common field shapes."""
    from contentbase.application.services import SchemaService

    service = SchemaService(db_session)
    stored_project = await service.create_project("Website", "en", ["fr", "de"])
    collection = await service.create_collection(stored_project.id, "Posts")

    await service.create_field(
        stored_project.id,
        collection.id,
        {"name": "title", "type": "text", "validations": {"required": {"status": True}}},
    )
    await service.create_field(
        stored_project.id,
        collection.id,
        {"name": "code", "type": "text", "validations": {"unique": {"status": True}}},
    )
    await service.create_field(stored_project.id, collection.id, {"name": "views", "type": "number"})
    await service.create_field(stored_project.id, collection.id, {"name": "cover", "type": "media"})
    await service.create_field(
        stored_project.id, collection.id, {"name": "tags", "type": "text", "options": {"repeatable": True}}
    )
    await service.create_field(stored_project.id, collection.id, {"name": "related", "type": "relation"})
    await service.create_field(stored_project.id, collection.id, {"name": "secret", "type": "password"})
    address = await service.create_field(
        stored_project.id, collection.id, {"name": "address", "type": "group"}
    )
    await service.create_field(
        stored_project.id,
        collection.id,
        {"name": "street", "type": "text", "parent_field_id": address.id},
    )
    await service.create_field(
        stored_project.id,
        collection.id,
        {"name": "pin", "type": "password", "parent_field_id": address.id},
    )
    await db_session.commit()

    return stored_project, await service.get_collection(stored_project.id, collection.id)
