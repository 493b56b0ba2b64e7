"""
AcadCentral Department Portal
Schema registry: the per-collection field mapping shared by the codec,
the repository and the sync API
"""

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Optional, Tuple, Type

from sqlalchemy import Date, DateTime, Table, inspect
from sqlalchemy.ext.asyncio import AsyncConnection

from ..exceptions import UnknownCollectionException
from ..store import keys
from .models import (
    CREATED_AT_COLUMN,
    Assignment,
    Attendance,
    AuditLog,
    ChatMessage,
    Classroom,
    CollectionModel,
    ExamEvent,
    Notice,
    QuizAttempt,
    QuizRoom,
    RepositoryFile,
    Result,
    Submission,
    TimetableSlot,
    User,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionSpec:
    """
    Declarative mapping between a collection's logical records and its mirror rows.

    json_fields   nested list/object fields stored as JSON text
    bool_fields   logical booleans stored as 0/1 integers
    aliases       logical field name -> column name where they differ
    natural_key   fields identifying a record besides its id
    """
    name: str
    model: Type[CollectionModel]
    json_fields: Tuple[str, ...] = ()
    bool_fields: Tuple[str, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict)
    natural_key: Optional[Tuple[str, ...]] = None

    @property
    def table(self) -> Table:
        return self.model.__table__

    @cached_property
    def columns(self) -> Tuple[str, ...]:
        """Record-carrying columns in declaration order, without mirror bookkeeping"""
        return tuple(c.name for c in self.table.columns if c.name != CREATED_AT_COLUMN)

    @cached_property
    def fields(self) -> Tuple[str, ...]:
        """Logical field names accepted from records"""
        reverse = self.reverse_aliases
        return tuple(reverse.get(column, column) for column in self.columns)

    @cached_property
    def reverse_aliases(self) -> Dict[str, str]:
        return {column: logical for logical, column in self.aliases.items()}

    @cached_property
    def datetime_columns(self) -> frozenset:
        return frozenset(
            c.name for c in self.table.columns
            if isinstance(c.type, DateTime) and c.name != CREATED_AT_COLUMN
        )

    @cached_property
    def date_columns(self) -> frozenset:
        return frozenset(
            c.name for c in self.table.columns
            if isinstance(c.type, Date) and not isinstance(c.type, DateTime)
        )

    def column_for(self, logical: str) -> str:
        return self.aliases.get(logical, logical)

    def field_for(self, column: str) -> str:
        return self.reverse_aliases.get(column, column)


COLLECTIONS: Dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec(keys.USERS, User, json_fields=("allocations",)),
        CollectionSpec(keys.FILES, RepositoryFile),
        CollectionSpec(keys.NOTICES, Notice, bool_fields=("urgent",)),
        CollectionSpec(keys.CLASSROOMS, Classroom, json_fields=("studentIds", "notes")),
        CollectionSpec(keys.ASSIGNMENTS, Assignment),
        CollectionSpec(keys.SUBMISSIONS, Submission),
        CollectionSpec(keys.QUIZ_ROOMS, QuizRoom, json_fields=("questions",)),
        CollectionSpec(keys.QUIZ_ATTEMPTS, QuizAttempt, json_fields=("answers",)),
        CollectionSpec(
            keys.CHAT_MESSAGES,
            ChatMessage,
            bool_fields=("read",),
            aliases={"read": "isRead"},
        ),
        CollectionSpec(keys.AUDIT_LOGS, AuditLog),
        CollectionSpec(keys.EXAM_EVENTS, ExamEvent),
        CollectionSpec(
            keys.ATTENDANCE,
            Attendance,
            natural_key=("date", "courseId", "studentId"),
        ),
        CollectionSpec(keys.TIMETABLE, TimetableSlot),
        CollectionSpec(
            keys.RESULTS,
            Result,
            natural_key=("assessmentName", "courseId", "studentId"),
        ),
    )
}


def is_synced_collection(name: Optional[str]) -> bool:
    return bool(name) and name in COLLECTIONS


def get_spec(name: Optional[str]) -> CollectionSpec:
    spec = COLLECTIONS.get(name) if name else None
    if spec is None:
        raise UnknownCollectionException(name)
    return spec


def columns_for(name: str) -> Tuple[str, ...]:
    """Ordered column names a record of ``name`` may persist"""
    return get_spec(name).columns


async def ensure_schema(conn: AsyncConnection, name: str) -> bool:
    """
    Create the collection's table if it does not exist yet.

    Safe to call repeatedly and never touches existing rows. Returns True
    when the table had to be created.
    """
    spec = get_spec(name)

    def _create(sync_conn) -> bool:
        existed = inspect(sync_conn).has_table(spec.table.name)
        spec.table.create(sync_conn, checkfirst=True)
        return not existed

    created = await conn.run_sync(_create)
    if created:
        logger.info(f"Created mirror table {spec.table.name}")
    return created


async def ensure_all_schemas(conn: AsyncConnection) -> int:
    """Ensure every collection table; returns how many were created"""
    created = 0
    for name in COLLECTIONS:
        if await ensure_schema(conn, name):
            created += 1
    logger.info(f"✅ All {len(COLLECTIONS)} mirror tables created/verified")
    return created


__all__ = [
    "CollectionSpec",
    "COLLECTIONS",
    "is_synced_collection",
    "get_spec",
    "columns_for",
    "ensure_schema",
    "ensure_all_schemas",
]
