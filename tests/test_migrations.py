"""
Tests for mirror schema migrations and the legacy JSON import
"""
import json

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import create_async_engine

from acadcentral.database.migrations import (
    SCHEMA_MIGRATIONS,
    SchemaMigration,
    apply_schema_migrations,
    get_applied_versions,
    import_legacy_json,
)
from acadcentral.database.repository import read_collection
from acadcentral.database.schema import ensure_all_schemas, ensure_schema
from acadcentral.store import keys


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path / "legacy.db"}')
    yield engine
    await engine.dispose()


async def column_names(conn, table: str) -> set:
    return await conn.run_sync(lambda c: {col['name'] for col in inspect(c).get_columns(table)})


class TestEnsureSchema:
    """Tests for idempotent table creation"""

    async def test_creates_once(self, engine):
        async with engine.begin() as conn:
            assert await ensure_schema(conn, keys.NOTICES) is True
            assert await ensure_schema(conn, keys.NOTICES) is False

    async def test_existing_rows_survive(self, engine):
        async with engine.begin() as conn:
            await ensure_all_schemas(conn)
            await conn.execute(text("INSERT INTO acportal_notices (id, title) VALUES ('n1', 'Kept')"))
            assert await ensure_all_schemas(conn) == 0
            rows = (await conn.execute(text('SELECT id FROM acportal_notices'))).all()

        assert rows == [('n1',)]


class TestSchemaMigrations:
    """Tests for the versioned column migrations"""

    async def test_adds_missing_columns_to_old_tables(self, engine):
        async with engine.begin() as conn:
            await conn.execute(text(
                'CREATE TABLE acportal_notices (id VARCHAR(100) PRIMARY KEY, title VARCHAR(500), '
                'created_at DATETIME DEFAULT CURRENT_TIMESTAMP)'
            ))
            await conn.execute(text(
                'CREATE TABLE acportal_users (id VARCHAR(100) PRIMARY KEY, name VARCHAR(255), '
                'created_at DATETIME DEFAULT CURRENT_TIMESTAMP)'
            ))
            await conn.execute(text("INSERT INTO acportal_notices (id, title) VALUES ('n1', 'Old')"))

            ran = await apply_schema_migrations(conn)

            assert ran == [m.version for m in SCHEMA_MIGRATIONS]
            assert 'urgent' in await column_names(conn, 'acportal_notices')
            assert {'program', 'section', 'allocations'} <= await column_names(conn, 'acportal_users')
            urgent = (await conn.execute(text("SELECT urgent FROM acportal_notices WHERE id = 'n1'"))).scalar()

        assert urgent == 0

    async def test_runs_each_version_once(self, engine):
        calls = []

        async def upgrade(conn):
            calls.append(1)
            return []

        migrations = [SchemaMigration(7, 'noop', upgrade)]

        async with engine.begin() as conn:
            assert await apply_schema_migrations(conn, migrations) == [7]
            assert await apply_schema_migrations(conn, migrations) == []
            assert 7 in await get_applied_versions(conn)

        assert len(calls) == 1

    async def test_missing_tables_skipped(self, engine):
        async with engine.begin() as conn:
            await apply_schema_migrations(conn)
            await ensure_all_schemas(conn)

            assert 'unit' in await column_names(conn, 'acportal_files')


class TestLegacyImport:
    """Tests for the one-time acportal-db.json import"""

    async def test_imports_and_renames(self, db_session, tmp_path):
        legacy = tmp_path / 'acportal-db.json'
        legacy.write_text(json.dumps({
            keys.NOTICES: [{'id': 'n1', 'title': 'Welcome', 'urgent': True}],
            keys.FILES: [],
            'acportal_current_user': {'id': 'u1'},
        }))

        imported = await import_legacy_json(db_session, str(legacy))

        assert imported == 1
        assert not legacy.exists()
        assert (tmp_path / 'acportal-db.json.migrated').exists()
        assert await read_collection(db_session, keys.NOTICES) == [{'id': 'n1', 'title': 'Welcome', 'urgent': True}]

    async def test_missing_file_is_noop(self, db_session, tmp_path):
        assert await import_legacy_json(db_session, str(tmp_path / 'absent.json')) == 0

    async def test_corrupt_file_left_in_place(self, db_session, tmp_path):
        legacy = tmp_path / 'acportal-db.json'
        legacy.write_text('{not json')

        assert await import_legacy_json(db_session, str(legacy)) == 0
        assert legacy.exists()
