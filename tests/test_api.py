"""
API Tests for the mirror endpoints
"""
import json

from httpx import ASGITransport, AsyncClient

from acadcentral.store import keys
from main import create_main_app

from conftest import MIRROR_BASE_URL


class TestHealth:
    """Tests for GET /health"""

    async def test_health(self, client):
        response = await client.get('/health')

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'ok'
        assert body['db'] == 'sqlite'
        assert body['timestamp'].endswith('Z')

    async def test_process_time_header(self, client):
        response = await client.get('/health')

        assert 'x-process-time' in response.headers

    async def test_root_health_matches_api_health(self, mirror_db):
        transport = ASGITransport(app=create_main_app())
        async with AsyncClient(transport=transport, base_url=MIRROR_BASE_URL) as ac:
            root = (await ac.get('/health')).json()
            mounted = (await ac.get('/api/health')).json()

        assert set(root) == set(mounted) == {'status', 'db', 'timestamp'}
        assert root['status'] == 'ok'
        assert root['db'] == mounted['db'] == 'sqlite'


class TestSync:
    """Tests for POST /sync"""

    async def test_replace_with_json_text(self, client):
        notices = [{'id': 'n1', 'title': 'Holiday'}, {'id': 'n2', 'title': 'Exam'}]

        response = await client.post('/sync', json={'key': keys.NOTICES, 'value': json.dumps(notices)})

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'count': 2}

    async def test_replace_with_list(self, client):
        response = await client.post('/sync', json={'key': keys.FILES, 'value': [{'id': 'f1'}]})

        assert response.json() == {'ok': True, 'count': 1}

    async def test_empty_value_truncates(self, client):
        await client.post('/sync', json={
            'key': keys.NOTICES,
            'value': json.dumps([{'id': f'n{i}', 'title': f'Notice {i}'} for i in range(5)]),
        })

        response = await client.post('/sync', json={'key': keys.NOTICES, 'value': '[]'})

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'count': 0}
        data = (await client.get('/data')).json()
        assert data[keys.NOTICES] == []

    async def test_non_list_skipped(self, client):
        response = await client.post('/sync', json={'key': keys.NOTICES, 'value': '{"id": "n1"}'})

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'skipped': True}

    async def test_unknown_key_rejected(self, client):
        response = await client.post('/sync', json={'key': keys.CURRENT_USER_KEY, 'value': '[]'})

        assert response.status_code == 400
        assert response.json()['error'] == 'UNKNOWN_COLLECTION'

    async def test_missing_key_rejected(self, client):
        response = await client.post('/sync', json={'value': '[]'})

        assert response.status_code == 400

    async def test_invalid_json_rejected(self, client):
        await client.post('/sync', json={'key': keys.NOTICES, 'value': [{'id': 'n1'}]})

        response = await client.post('/sync', json={'key': keys.NOTICES, 'value': '[{"id": '})

        assert response.status_code == 400
        assert response.json()['error'] == 'INVALID_PAYLOAD'
        data = (await client.get('/data')).json()
        assert [n['id'] for n in data[keys.NOTICES]] == ['n1']


class TestSyncAll:
    """Tests for POST /sync-all"""

    async def test_applies_recognized_keys(self, client):
        response = await client.post('/sync-all', json={
            keys.USERS: [{'id': 'u1', 'role': 'admin'}],
            keys.NOTICES: [{'id': 'n1'}, {'id': 'n2'}],
            keys.CURRENT_USER_KEY: {'id': 'u1'},
            'something_else': [{'id': 'x'}],
        })

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'total': 3}

        data = (await client.get('/data')).json()
        assert 'something_else' not in data
        assert [u['id'] for u in data[keys.USERS]] == ['u1']

    async def test_rejects_non_object_body(self, client):
        response = await client.post('/sync-all', json=[1, 2])

        assert response.status_code == 422


class TestData:
    """Tests for GET /data"""

    async def test_every_collection_present(self, client):
        data = (await client.get('/data')).json()

        assert set(data) == set(keys.SYNC_KEYS)
        assert all(records == [] for records in data.values())

    async def test_chat_read_flag_round_trip(self, client):
        await client.post('/sync', json={'key': keys.CHAT_MESSAGES, 'value': [{'id': 'm1', 'read': False}]})

        data = (await client.get('/data')).json()

        assert data[keys.CHAT_MESSAGES] == [{'id': 'm1', 'read': False}]

    async def test_nested_and_timestamp_fields(self, client):
        classroom = {
            'id': 'c1',
            'name': 'Data Structures',
            'studentIds': ['s1', 's2'],
            'notes': [{'id': 'note-1', 'name': 'Unit 1'}],
            'createdAt': '2024-02-01T09:30:00.125Z',
        }
        await client.post('/sync', json={'key': keys.CLASSROOMS, 'value': json.dumps([classroom])})

        data = (await client.get('/data')).json()

        assert data[keys.CLASSROOMS] == [classroom]

    async def test_unreachable_database_is_an_error(self, unreachable_mirror_app):
        transport = ASGITransport(app=unreachable_mirror_app)
        async with AsyncClient(transport=transport, base_url=MIRROR_BASE_URL) as ac:
            response = await ac.get('/data')

        assert response.status_code == 500
        assert response.json()['error'] == 'EXTERNAL_SERVICE_ERROR'
