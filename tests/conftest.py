"""
Pytest configuration and shared fixtures.

Each test gets its own SQLite database file so separate sessions behave
like separate requests.
"""

import pytest
import pytest_asyncio
from datetime import date
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from app.main import app
from app.database import Base, get_db
from app.core.auth import get_current_caller
from app.models.task import Task
from app.models.worker import Worker
from app.schemas.evaluation import EntryIn


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client with the database and caller identity swapped for test ones."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_caller] = lambda: "test-admin"
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_worker(db):
    """Factory: await make_worker("name", salary=...)"""
    async def _make(name: str, salary=None) -> Worker:
        worker = Worker(name=name, salary=salary)
        db.add(worker)
        await db.commit()
        return worker
    return _make


@pytest.fixture
def make_task(db):
    """Factory: await make_task("name", target_quantity)"""
    async def _make(name: str, target_quantity: int) -> Task:
        task = Task(name=name, target_quantity=target_quantity)
        db.add(task)
        await db.commit()
        return task
    return _make


@pytest.fixture
def entries():
    """entries((task_id, quantity), ...) -> list of EntryIn"""
    def _entries(*pairs):
        return [EntryIn(task_id=task_id, quantity=quantity) for task_id, quantity in pairs]
    return _entries


@pytest_asyncio.fixture
async def worker(make_worker) -> Worker:
    """Worker with a monthly salary of 900."""
    return await make_worker("Samir", salary=900.0)


@pytest_asyncio.fixture
async def task(make_task) -> Task:
    """Task with a target of 100 units."""
    return await make_task("Packing", 100)


@pytest.fixture
def may_first() -> date:
    return date(2024, 5, 1)
