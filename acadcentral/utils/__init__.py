from .helpers import (
    format_timestamp,
    generate_id,
    make_initials,
    parse_timestamp,
    setup_logging,
    timestamp_sort_key,
    utc_now,
    utc_now_iso,
)

__all__ = [
    "setup_logging",
    "generate_id",
    "utc_now",
    "utc_now_iso",
    "format_timestamp",
    "parse_timestamp",
    "timestamp_sort_key",
    "make_initials",
]
