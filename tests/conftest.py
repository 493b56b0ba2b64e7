"""
AcadCentral - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'

from acadcentral.app import create_app
from acadcentral.database import connection
from acadcentral.database.connection import close_database_connections, get_db, init_database
from acadcentral.services import Portal
from acadcentral.store import LocalStore
from acadcentral.sync import EventBus, MirrorClient

fake = Faker()

MIRROR_BASE_URL = 'http://mirror.test'


@pytest.fixture
async def mirror_db(tmp_path) -> AsyncGenerator[str, None]:
    """Fresh mirror database on a temporary SQLite file"""
    database_url = f'sqlite+aiosqlite:///{tmp_path / "mirror.db"}'
    await init_database(database_url, legacy_json_path='')
    yield database_url
    await close_database_connections()


@pytest.fixture
async def db_session(mirror_db):
    """Session on the mirror database"""
    async with connection.AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def mirror_app(mirror_db):
    return create_app()


@pytest.fixture
async def client(mirror_app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the mirror API in-process"""
    transport = ASGITransport(app=mirror_app)
    async with AsyncClient(transport=transport, base_url=MIRROR_BASE_URL) as ac:
        yield ac


@pytest.fixture
async def unreachable_mirror_app(tmp_path):
    """Mirror API whose database file cannot be opened"""
    engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path / "missing" / "mirror.db"}')
    sessions = async_sessionmaker(engine, expire_on_commit=False)

    async def unreachable_db():
        async with sessions() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db] = unreachable_db
    yield app
    await engine.dispose()


@pytest.fixture
async def mirror_client(mirror_app) -> AsyncGenerator[MirrorClient, None]:
    """MirrorClient wired to the in-process mirror API"""
    mirror = MirrorClient(MIRROR_BASE_URL, transport=ASGITransport(app=mirror_app))
    yield mirror
    await mirror.aclose()


@pytest.fixture
def store() -> LocalStore:
    """In-memory Local Store"""
    return LocalStore()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def portal(store: LocalStore) -> Portal:
    return Portal(store)


def make_user(role: str = 'student', **overrides) -> dict:
    """A user record as the portal stores it"""
    name = fake.name()
    user = {
        'id': f'{role}-{fake.uuid4()[:8]}',
        'role': role,
        'name': name,
        'email': fake.unique.email().lower(),
        'password': 'secret123',
        'usn': fake.bothify('1??##CS###').upper() if role == 'student' else None,
        'semester': '3' if role == 'student' else None,
        'program': 'BCA' if role == 'student' else None,
        'section': 'A' if role == 'student' else None,
        'avatar': ''.join(part[0] for part in name.split()[:2]).upper(),
    }
    user.update(overrides)
    return user


@pytest.fixture
def student() -> dict:
    return make_user('student')


@pytest.fixture
def faculty() -> dict:
    return make_user('faculty')


@pytest.fixture
def admin() -> dict:
    return make_user('admin')
