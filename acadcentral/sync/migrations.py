"""
AcadCentral Department Portal
Versioned one-time migrations run against the Local Store at startup
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence

from ..store import LocalStore, keys

logger = logging.getLogger(__name__)

# Demo data shipped by early builds of the portal
LEGACY_DEMO_EMAILS = frozenset({"hod@dept.edu", "sharma@dept.edu", "meena@dept.edu"})
LEGACY_DEMO_UPLOADER_IDS = frozenset({"faculty-001", "faculty-002", "student-001", "student-002"})
LEGACY_DEMO_NOTICE_IDS = frozenset({"notice-001", "notice-002", "notice-003"})

ADMIN_EMAIL = "admin123@gmail.com"
ADMIN_PASSWORD = "Admin@861"
ADMIN_NAME = "HOD / Admin"
ADMIN_AVATAR = "HA"


@dataclass(frozen=True)
class StoreMigration:
    version: int
    name: str
    apply: Callable[[LocalStore], None]


def purge_legacy_demo_data(store: LocalStore) -> None:
    """Drop the demo accounts, files and notices and reset the admin login"""
    users = [u for u in store.read_collection(keys.USERS) if u.get("email") not in LEGACY_DEMO_EMAILS]
    admin = next((u for u in users if u.get("role") == "admin"), None)
    if admin is not None:
        admin.update(
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            name=ADMIN_NAME,
            avatar=ADMIN_AVATAR,
        )
    store.write_collection(keys.USERS, users)

    files = store.read_collection(keys.FILES)
    store.write_collection(
        keys.FILES,
        [f for f in files if f.get("uploaderId") not in LEGACY_DEMO_UPLOADER_IDS],
    )

    notices = store.read_collection(keys.NOTICES)
    store.write_collection(
        keys.NOTICES,
        [n for n in notices if n.get("id") not in LEGACY_DEMO_NOTICE_IDS],
    )

    current_user = store.read_json(keys.CURRENT_USER_KEY)
    if isinstance(current_user, dict) and current_user.get("email") in LEGACY_DEMO_EMAILS:
        store.remove_item(keys.CURRENT_USER_KEY)


# Ordered by version; never renumber or edit an entry that has shipped
STORE_MIGRATIONS: List[StoreMigration] = [
    StoreMigration(1, "purge_legacy_demo_data", purge_legacy_demo_data),
]


def get_store_version(store: LocalStore) -> int:
    raw = store.get_item(keys.MIGRATION_VERSION_KEY)
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"⚠️ Ignoring malformed migration version {raw!r}")
    # Stores migrated before versioning carry only the old marker
    if store.has_item(keys.LEGACY_MIGRATION_MARKER):
        return 1
    return 0


def run_store_migrations(
    store: LocalStore,
    migrations: Sequence[StoreMigration] = STORE_MIGRATIONS
) -> List[int]:
    """Apply every migration newer than the store's version; returns the versions applied"""
    current = get_store_version(store)
    applied = []

    for migration in sorted(migrations, key=lambda m: m.version):
        if migration.version <= current:
            continue
        migration.apply(store)
        store.set_item(keys.MIGRATION_VERSION_KEY, str(migration.version))
        applied.append(migration.version)
        logger.info(f"Applied store migration {migration.version} ({migration.name})")

    return applied


__all__ = [
    "StoreMigration",
    "STORE_MIGRATIONS",
    "purge_legacy_demo_data",
    "get_store_version",
    "run_store_migrations",
]
