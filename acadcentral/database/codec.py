"""
AcadCentral Department Portal
Record codec: translates between in-memory records and mirror rows

Both directions are driven by the collection's CollectionSpec so every
rename and type rewrite is declared once.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from ..utils.helpers import format_timestamp, parse_timestamp
from .models import CREATED_AT_COLUMN
from .schema import CollectionSpec, get_spec

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def _to_db_datetime(value: Any) -> Optional[datetime]:
    """ISO-8601 string -> naive UTC datetime, which is what the engine binds"""
    if value is None or value == "":
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        logger.warning(f"Dropping unparsable timestamp value {value!r}")
        return None
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def _to_db_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning(f"Dropping unparsable date value {value!r}")
        return None


def _from_db_datetime(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def _from_db_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def encode(collection: str, record: Record) -> Record:
    """
    Record -> row.

    Nested values become JSON text, booleans become 0/1, aliased fields are
    renamed to their column, timestamps become engine datetimes. Fields the
    schema does not declare are dropped.
    """
    spec = get_spec(collection)
    return encode_with_spec(spec, record)


def encode_with_spec(spec: CollectionSpec, record: Record) -> Record:
    valid_columns = set(spec.columns)
    row: Record = {}

    for logical, value in record.items():
        column = spec.column_for(logical)
        if column not in valid_columns:
            continue

        if logical in spec.json_fields:
            if value is not None and not isinstance(value, str):
                value = json.dumps(value)
        elif logical in spec.bool_fields:
            value = 1 if value else 0
        elif column in spec.datetime_columns:
            value = _to_db_datetime(value)
        elif column in spec.date_columns:
            value = _to_db_date(value)

        row[column] = value

    return row


def decode(collection: str, row: Record) -> Record:
    """
    Row -> record.

    Inverse of encode. The mirror's ``created_at`` bookkeeping column never
    reaches the record. A JSON field that fails to parse keeps its raw text.
    """
    spec = get_spec(collection)
    return decode_with_spec(spec, row)


def decode_with_spec(spec: CollectionSpec, row: Record) -> Record:
    record: Record = {}

    for column, value in row.items():
        if column == CREATED_AT_COLUMN:
            continue

        logical = spec.field_for(column)

        if logical in spec.json_fields:
            if isinstance(value, str):
                try:
                    value = json.loads(value)
                except ValueError:
                    pass
        elif logical in spec.bool_fields:
            value = bool(value)
        elif column in spec.datetime_columns:
            value = _from_db_datetime(value)
        elif column in spec.date_columns:
            value = _from_db_date(value)

        record[logical] = value

    return record


__all__ = ["encode", "decode", "encode_with_spec", "decode_with_spec", "Record"]
