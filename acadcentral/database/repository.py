"""
AcadCentral Department Portal
Per-collection mirror writes and reads: upsert, full-collection replace, reads
"""

import logging
from typing import Any, Dict, Iterable, List

from sqlalchemy import and_, delete, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import DatabaseConnectionException
from .codec import Record, decode_with_spec, encode_with_spec
from .models import CREATED_AT_COLUMN
from .schema import COLLECTIONS, CollectionSpec, get_spec

logger = logging.getLogger(__name__)


def _upsert_statement(dialect_name: str, spec: CollectionSpec, row: Record):
    """INSERT ... ON CONFLICT/DUPLICATE KEY UPDATE keyed by id, per dialect"""
    table = spec.table
    update_columns = [column for column in row if column != "id"]

    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(table).values(row)
        if not update_columns:
            return stmt.prefix_with("IGNORE")
        return stmt.on_duplicate_key_update(
            {column: stmt.inserted[column] for column in update_columns}
        )

    if dialect_name == "postgresql":
        stmt = postgresql.insert(table).values(row)
    elif dialect_name == "sqlite":
        stmt = sqlite.insert(table).values(row)
    else:
        raise NotImplementedError(f"Upsert not supported for dialect {dialect_name}")

    if not update_columns:
        return stmt.on_conflict_do_nothing(index_elements=[table.c.id])
    return stmt.on_conflict_do_update(
        index_elements=[table.c.id],
        set_={column: stmt.excluded[column] for column in update_columns}
    )


async def _evict_natural_key_duplicates(session: AsyncSession, spec: CollectionSpec, row: Record) -> None:
    """Keep at most one row per natural key: rows with the same key but another id go"""
    columns = [spec.column_for(name) for name in spec.natural_key]
    if any(row.get(column) is None for column in columns):
        return

    table = spec.table
    await session.execute(
        delete(table).where(
            and_(*(table.c[column] == row[column] for column in columns)),
            table.c.id != row["id"],
        )
    )


async def upsert_record(session: AsyncSession, collection: str, record: Dict[str, Any]) -> bool:
    """
    Insert-or-update one record keyed by id.

    Records without an id are skipped (returns False). Undeclared fields are
    dropped by the codec before writing. For natural-key collections any
    other row holding the same natural key is removed first.
    """
    spec = get_spec(collection)
    if not isinstance(record, dict) or not record.get("id"):
        return False

    row = encode_with_spec(spec, record)
    row["id"] = str(record["id"])

    if spec.natural_key:
        await _evict_natural_key_duplicates(session, spec, row)

    dialect_name = session.bind.dialect.name
    await session.execute(_upsert_statement(dialect_name, spec, row))
    return True


async def replace_collection(session: AsyncSession, collection: str, records: Iterable[Any]) -> int:
    """
    Make the mirror table hold exactly ``records``.

    Every record with an id is upserted, then every stored row whose id is
    absent from ``records`` is deleted; an empty payload clears the table.
    The caller owns the transaction. Returns the number of upserted records.
    """
    spec = get_spec(collection)
    table = spec.table

    incoming_ids: List[str] = []
    for record in records:
        if await upsert_record(session, collection, record):
            incoming_ids.append(str(record["id"]))

    if incoming_ids:
        await session.execute(delete(table).where(table.c.id.notin_(incoming_ids)))
    else:
        await session.execute(delete(table))

    logger.debug(f"Replaced {collection} with {len(incoming_ids)} records")
    return len(incoming_ids)


async def read_collection(session: AsyncSession, collection: str) -> List[Record]:
    """Every stored record of a collection, oldest row first (ties by id), NULL columns omitted"""
    spec = get_spec(collection)
    table = spec.table

    result = await session.execute(select(table).order_by(table.c[CREATED_AT_COLUMN], table.c.id))
    records = []
    for row in result.mappings():
        present = {column: value for column, value in row.items() if value is not None}
        records.append(decode_with_spec(spec, present))
    return records


async def read_all(session: AsyncSession) -> Dict[str, List[Record]]:
    """
    Every collection keyed by name; a table that fails to read comes back
    empty. An unreachable database raises DatabaseConnectionException
    instead, so callers never mistake an outage for empty collections.
    """
    try:
        await session.connection()
    except SQLAlchemyError as e:
        logger.error(f"❌ Mirror database unreachable: {e}")
        raise DatabaseConnectionException(f"Mirror database unreachable: {e}") from e

    data: Dict[str, List[Record]] = {}
    for name in COLLECTIONS:
        try:
            data[name] = await read_collection(session, name)
        except Exception as e:
            logger.error(f"❌ Failed to read mirror table {name}: {e}")
            await session.rollback()
            data[name] = []
    return data


__all__ = [
    "upsert_record",
    "replace_collection",
    "read_collection",
    "read_all",
]
