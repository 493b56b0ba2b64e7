"""
AcadCentral Department Portal
Shared plumbing for the domain services
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..exceptions import AppException
from ..store import LocalStore, keys
from ..utils.helpers import generate_id, utc_now_iso

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

AUDIT_LOG_LIMIT = 500


@dataclass
class OperationResult:
    """Outcome of an operation the portal reports as success or an error message"""
    success: bool
    value: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "OperationResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, exc: AppException) -> "OperationResult":
        return cls(success=False, error=exc.message, error_code=exc.error_code)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "value": self.value}
        return {"success": False, "error": self.error}


def returns_result(func):
    """Turn an operation that raises AppException into one returning OperationResult"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> OperationResult:
        try:
            return OperationResult.ok(func(*args, **kwargs))
        except AppException as e:
            logger.debug(f"{func.__name__} rejected: {e.message}")
            return OperationResult.fail(e)
    return wrapper


def natural_key_index(records: List[Record], fields: Tuple[str, ...]) -> Dict[Tuple, int]:
    """Position of the first record holding each natural key value"""
    index = {}
    for i, record in enumerate(records):
        index.setdefault(tuple(record.get(f) for f in fields), i)
    return index


def upsert_by_natural_key(
    records: List[Record],
    incoming: Iterable[Record],
    fields: Tuple[str, ...],
    update: Callable[[Record, Record], Record],
    create: Callable[[Record], Record]
) -> List[Record]:
    """
    Merge ``incoming`` into ``records`` in place: a record matching on every
    natural-key field is replaced by ``update(existing, new)``, anything else
    is appended as ``create(new)``. Returns ``records``.
    """
    index = natural_key_index(records, fields)
    for record in incoming:
        natural_key = tuple(record.get(f) for f in fields)
        if natural_key in index:
            i = index[natural_key]
            records[i] = update(records[i], record)
        else:
            index[natural_key] = len(records)
            records.append(create(record))
    return records


def as_list(value: Any) -> List[Any]:
    """A stored list field, or a fresh empty list when it holds anything else"""
    return list(value) if isinstance(value, list) else []


def public_user(user: Record) -> Record:
    """Copy of a user record safe to keep as the signed-in user"""
    safe = dict(user)
    safe.pop("password", None)
    return safe


class AuditLog:
    """Append-only activity log, newest first, capped at the most recent entries"""

    def __init__(self, store: LocalStore):
        self.store = store

    def log(self, action: str, user: Optional[Record] = None, detail: str = "") -> Record:
        user = user or {}
        entry = {
            "id": generate_id("log"),
            "action": action,
            "userId": user.get("id") or "system",
            "userName": user.get("name") or "System",
            "role": user.get("role") or "system",
            "detail": detail,
            "timestamp": utc_now_iso(),
        }
        logs = self.store.read_collection(keys.AUDIT_LOGS)
        logs.insert(0, entry)
        self.store.write_collection(keys.AUDIT_LOGS, logs[:AUDIT_LOG_LIMIT])
        return entry

    def get_logs(self) -> List[Record]:
        return self.store.read_collection(keys.AUDIT_LOGS)


class BaseService:
    """A domain service bound to one Local Store and its audit log"""

    def __init__(self, store: LocalStore, audit: Optional[AuditLog] = None):
        self.store = store
        self.audit = audit or AuditLog(store)

    def _read(self, key: str) -> List[Record]:
        return self.store.read_collection(key)

    def _write(self, key: str, records: List[Record]) -> None:
        self.store.write_collection(key, records)

    @staticmethod
    def _find_index(records: List[Record], record_id: str) -> int:
        return next((i for i, r in enumerate(records) if r.get("id") == record_id), -1)


__all__ = [
    "Record",
    "AUDIT_LOG_LIMIT",
    "OperationResult",
    "returns_result",
    "natural_key_index",
    "upsert_by_natural_key",
    "as_list",
    "public_user",
    "AuditLog",
    "BaseService",
]
