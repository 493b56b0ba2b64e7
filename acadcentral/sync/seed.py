"""
AcadCentral Department Portal
Default seeding of the Local Store after hydration and migrations
"""

import logging
from typing import Any, Dict

from ..store import LocalStore, keys
from .migrations import ADMIN_AVATAR, ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM = "BCA"
DEFAULT_SECTION = "A"


def default_admin() -> Dict[str, Any]:
    return {
        "id": "admin-001",
        "role": "admin",
        "name": ADMIN_NAME,
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
        "usn": None,
        "semester": None,
        "program": None,
        "section": None,
        "avatar": ADMIN_AVATAR,
    }


def seed_defaults(store: LocalStore) -> None:
    """
    Guarantee an admin account, give students without a program the
    default grouping and initialize every missing collection key to [].
    Existing data is never replaced.
    """
    users = store.read_collection(keys.USERS)

    if not any(u.get("role") == "admin" for u in users):
        users.append(default_admin())
        store.write_collection(keys.USERS, users)
        logger.info("Seeded default admin account")

    backfilled = 0
    for user in users:
        if user.get("role") == "student" and not user.get("program"):
            user["program"] = DEFAULT_PROGRAM
            user["section"] = DEFAULT_SECTION
            backfilled += 1
    if backfilled:
        store.write_collection(keys.USERS, users)
        logger.info(f"Backfilled program/section for {backfilled} student(s)")

    for key in keys.COLLECTION_KEYS:
        if not store.get_item(key):
            store.write_collection(key, [])


__all__ = ["seed_defaults", "default_admin"]
