from .codec import decode, encode
from .repository import read_all, read_collection, replace_collection, upsert_record
from .schema import COLLECTIONS, CollectionSpec, columns_for, ensure_schema, get_spec, is_synced_collection

__all__ = [
    "COLLECTIONS",
    "CollectionSpec",
    "columns_for",
    "ensure_schema",
    "get_spec",
    "is_synced_collection",
    "encode",
    "decode",
    "upsert_record",
    "replace_collection",
    "read_collection",
    "read_all",
]
