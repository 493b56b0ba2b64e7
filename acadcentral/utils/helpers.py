"""
AcadCentral Department Portal
Shared helpers: logging setup, id generation and timestamp handling
"""

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

from ..config import get_settings

_ID_ALPHABET = string.ascii_lowercase + string.digits


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger from settings"""
    settings = get_settings()
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=settings.LOG_FORMAT,
    )
    # Quiet down chatty libraries unless we are debugging
    if not settings.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def random_suffix(length: int = 5) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_id(prefix: str) -> str:
    """Time-based record id with a random suffix, e.g. ``notice-1708450724124-k3x9a``"""
    return f"{prefix}-{int(time.time() * 1000)}-{random_suffix()}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a ``Z`` suffix"""
    return format_timestamp(utc_now())


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime; ``None`` if it is not one"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def timestamp_sort_key(value) -> datetime:
    """Sort key for optional timestamps; unparsable values sort as the epoch"""
    return parse_timestamp(value) or _EPOCH


def make_initials(name: str) -> str:
    """'Asha Rao Kumar' -> 'AR'"""
    parts = [part for part in (name or "").strip().split(" ") if part]
    return "".join(part[0] for part in parts)[:2].upper()


__all__ = [
    "setup_logging",
    "random_suffix",
    "generate_id",
    "utc_now",
    "utc_now_iso",
    "format_timestamp",
    "parse_timestamp",
    "timestamp_sort_key",
    "make_initials",
]
