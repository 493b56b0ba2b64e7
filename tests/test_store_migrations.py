"""
Unit Tests for Local Store migrations and default seeding
"""
from acadcentral.store import keys
from acadcentral.sync.migrations import StoreMigration, get_store_version, run_store_migrations
from acadcentral.sync.seed import seed_defaults

from conftest import make_user


def legacy_store(store):
    store.write_collection(keys.USERS, [
        make_user('admin', id='admin-001', email='hod@dept.edu'),
        make_user('admin', id='admin-002', email='principal@dept.edu', password='old'),
        make_user('faculty', email='sharma@dept.edu'),
        make_user('student', id='student-777', email='asha@dept.edu'),
    ])
    store.write_collection(keys.FILES, [
        {'id': 'f1', 'uploaderId': 'faculty-001'},
        {'id': 'f2', 'uploaderId': 'student-777'},
    ])
    store.write_collection(keys.NOTICES, [{'id': 'notice-001'}, {'id': 'notice-42'}])
    store.write_json(keys.CURRENT_USER_KEY, {'id': 'x', 'email': 'meena@dept.edu'})
    return store


class TestStoreMigrations:
    """Tests for the versioned one-time migrations"""

    def test_purges_demo_data(self, store):
        legacy_store(store)

        assert run_store_migrations(store) == [1]

        users = store.read_collection(keys.USERS)
        assert [u['id'] for u in users] == ['admin-002', 'student-777']
        admin = users[0]
        assert admin['email'] == 'admin123@gmail.com'
        assert admin['password'] == 'Admin@861'
        assert admin['name'] == 'HOD / Admin'
        assert admin['avatar'] == 'HA'
        assert [f['id'] for f in store.read_collection(keys.FILES)] == ['f2']
        assert [n['id'] for n in store.read_collection(keys.NOTICES)] == ['notice-42']
        assert store.get_item(keys.CURRENT_USER_KEY) is None
        assert store.get_item(keys.MIGRATION_VERSION_KEY) == '1'

    def test_runs_at_most_once(self, store):
        run_store_migrations(store)
        store.write_collection(keys.NOTICES, [{'id': 'notice-001'}])

        assert run_store_migrations(store) == []
        assert store.read_collection(keys.NOTICES) == [{'id': 'notice-001'}]

    def test_legacy_marker_counts_as_migrated(self, store):
        store.set_item(keys.LEGACY_MIGRATION_MARKER, '1')
        store.write_collection(keys.NOTICES, [{'id': 'notice-001'}])

        assert get_store_version(store) == 1
        assert run_store_migrations(store) == []
        assert store.read_collection(keys.NOTICES) == [{'id': 'notice-001'}]

    def test_newer_migrations_applied_in_order(self, store):
        applied = []
        migrations = [
            StoreMigration(3, 'third', lambda s: applied.append(3)),
            StoreMigration(2, 'second', lambda s: applied.append(2)),
        ]
        store.set_item(keys.MIGRATION_VERSION_KEY, '1')

        assert run_store_migrations(store, migrations) == [2, 3]
        assert applied == [2, 3]
        assert store.get_item(keys.MIGRATION_VERSION_KEY) == '3'


class TestSeedDefaults:
    """Tests for default seeding"""

    def test_empty_store(self, store):
        seed_defaults(store)

        users = store.read_collection(keys.USERS)
        assert [u['id'] for u in users] == ['admin-001']
        assert users[0]['role'] == 'admin'
        for key in keys.COLLECTION_KEYS:
            assert store.get_item(key) is not None
        assert store.read_collection(keys.RESULTS) == []

    def test_existing_admin_kept(self, store):
        admin = make_user('admin', id='admin-9')
        store.write_collection(keys.USERS, [admin])

        seed_defaults(store)

        assert store.read_collection(keys.USERS) == [admin]

    def test_students_get_default_grouping(self, store):
        store.write_collection(keys.USERS, [
            make_user('admin'),
            make_user('student', id='s1', program=None, section=None),
            make_user('student', id='s2', program='BBA', section='B'),
        ])

        seed_defaults(store)

        students = {u['id']: u for u in store.read_collection(keys.USERS) if u['role'] == 'student'}
        assert (students['s1']['program'], students['s1']['section']) == ('BCA', 'A')
        assert (students['s2']['program'], students['s2']['section']) == ('BBA', 'B')

    def test_existing_collections_untouched(self, store):
        store.write_collection(keys.NOTICES, [{'id': 'n1'}])

        seed_defaults(store)

        assert store.read_collection(keys.NOTICES) == [{'id': 'n1'}]
