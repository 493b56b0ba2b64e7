"""
AcadCentral Department Portal
Versioned mirror schema migrations and the one-time legacy JSON import
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Sequence

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, func, inspect, insert, select, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from .models import Attendance, Notice, RepositoryFile, Result, TimetableSlot, User
from .repository import replace_collection
from .schema import is_synced_collection

logger = logging.getLogger(__name__)

migration_metadata = MetaData()

schema_migrations = Table(
    "schema_migrations",
    migration_metadata,
    Column("version", Integer, primary_key=True, autoincrement=False),
    Column("name", String(255), nullable=False),
    Column("applied_at", DateTime, server_default=func.now(), nullable=False),
)


@dataclass(frozen=True)
class SchemaMigration:
    version: int
    name: str
    upgrade: Callable[[AsyncConnection], Awaitable[List[str]]]


async def add_missing_columns(conn: AsyncConnection, table: Table, column_names: Sequence[str]) -> List[str]:
    """
    ALTER TABLE ... ADD COLUMN for each named column of ``table`` that the
    live table lacks. Column types and defaults come from the model.
    Returns the columns that were added.
    """
    def _existing(sync_conn):
        inspector = inspect(sync_conn)
        if not inspector.has_table(table.name):
            return None
        return {col["name"] for col in inspector.get_columns(table.name)}

    existing = await conn.run_sync(_existing)
    if existing is None:
        return []

    preparer = conn.dialect.identifier_preparer
    added = []
    for name in column_names:
        if name in existing:
            continue
        column = table.c[name]
        ddl = (
            f"ALTER TABLE {preparer.quote(table.name)} "
            f"ADD COLUMN {preparer.quote(name)} {column.type.compile(dialect=conn.dialect)}"
        )
        if column.server_default is not None:
            default = str(column.server_default.arg)
            ddl += f" DEFAULT {default}" if default.isdigit() else f" DEFAULT '{default}'"
        await conn.execute(text(ddl))
        added.append(name)
        logger.info(f"Added column {table.name}.{name}")
    return added


async def _add_notice_urgency(conn: AsyncConnection) -> List[str]:
    return await add_missing_columns(conn, Notice.__table__, ["urgent"])


async def _add_file_unit(conn: AsyncConnection) -> List[str]:
    return await add_missing_columns(conn, RepositoryFile.__table__, ["unit", "size"])


async def _add_student_grouping(conn: AsyncConnection) -> List[str]:
    return await add_missing_columns(conn, User.__table__, ["program", "section", "allocations"])


async def _add_record_metadata(conn: AsyncConnection) -> List[str]:
    added = await add_missing_columns(conn, Attendance.__table__, ["createdAt"])
    added += await add_missing_columns(conn, Result.__table__, ["createdAt"])
    added += await add_missing_columns(
        conn, TimetableSlot.__table__, ["sub", "name", "teacher", "createdBy", "createdAt"]
    )
    return added


# Ordered by version; never renumber or edit an entry that has shipped
SCHEMA_MIGRATIONS: List[SchemaMigration] = [
    SchemaMigration(1, "add_notice_urgency", _add_notice_urgency),
    SchemaMigration(2, "add_file_unit", _add_file_unit),
    SchemaMigration(3, "add_student_grouping", _add_student_grouping),
    SchemaMigration(4, "add_record_metadata", _add_record_metadata),
]


async def get_applied_versions(conn: AsyncConnection) -> set:
    await conn.run_sync(migration_metadata.create_all)
    result = await conn.execute(select(schema_migrations.c.version))
    return {row[0] for row in result}


async def apply_schema_migrations(
    conn: AsyncConnection,
    migrations: Sequence[SchemaMigration] = SCHEMA_MIGRATIONS
) -> List[int]:
    """Run every migration not yet recorded, in version order; returns the versions run"""
    applied = await get_applied_versions(conn)
    ran = []

    for migration in sorted(migrations, key=lambda m: m.version):
        if migration.version in applied:
            continue
        added = await migration.upgrade(conn)
        await conn.execute(
            insert(schema_migrations).values(version=migration.version, name=migration.name)
        )
        ran.append(migration.version)
        logger.info(
            f"Applied schema migration {migration.version} ({migration.name})"
            + (f": added {', '.join(added)}" if added else "")
        )

    if ran:
        logger.info(f"✅ Applied {len(ran)} schema migration(s)")
    return ran


async def import_legacy_json(session: AsyncSession, json_path: str) -> int:
    """
    Load a pre-database ``acportal-db.json`` dump into the mirror once.

    Every recognised, non-empty collection replaces its table. On success the
    file is renamed to ``<name>.migrated`` so it is never imported again.
    Failures are logged and leave the file in place.
    """
    path = Path(json_path)
    if not path.exists():
        return 0

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)

        migrated = 0
        for key, records in data.items():
            if is_synced_collection(key) and isinstance(records, list) and records:
                await replace_collection(session, key, records)
                migrated += len(records)

        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"⚠️ Migration from {path.name} failed: {e}")
        return 0

    if migrated > 0:
        os.replace(path, path.with_name(path.name + ".migrated"))
        logger.info(f"✅ Migrated {migrated} records from {path.name} into the mirror")
    return migrated


__all__ = [
    "SchemaMigration",
    "SCHEMA_MIGRATIONS",
    "schema_migrations",
    "add_missing_columns",
    "apply_schema_migrations",
    "get_applied_versions",
    "import_legacy_json",
]
